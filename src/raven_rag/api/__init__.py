from raven_rag.api.app import build_services, create_app

__all__ = ["create_app", "build_services"]
