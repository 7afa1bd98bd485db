"""Ingress module."""

from .service import IIngressService, IngressResult, IngressService, is_acceptable

__all__ = ["IIngressService", "IngressResult", "IngressService", "is_acceptable"]
