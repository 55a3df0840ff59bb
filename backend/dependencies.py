"""
Numeris - FastAPI dependencies

Everything here reads the objects server.py built at startup from
app.state; tests swap them through app.dependency_overrides.
"""

from fastapi import Request

from config import Settings


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_user_repository(request: Request):
    return request.app.state.user_repository


def get_invoice_repository(request: Request):
    return request.app.state.invoice_repository


def get_activity_repository(request: Request):
    return request.app.state.activity_repository


def get_activity_logger(request: Request):
    return request.app.state.activity_logger


def get_password_hasher(request: Request):
    return request.app.state.password_hasher


def get_token_service(request: Request):
    return request.app.state.token_service


def get_scheduler(request: Request):
    return request.app.state.scheduler
