from .access_verifier import AccessVerifier

__all__ = ["AccessVerifier"]
