from codeshare.extension.identity.base import Identity, IdentityProvider
from codeshare.extension.identity.local import LocalIdentityProvider


def build_identity_provider(settings) -> IdentityProvider:
    """按 settings.identity.backend 构建身份提供方"""
    backend = (settings.identity.backend or "local").lower()
    if backend == "firebase":
        from codeshare.extension.google_tools.identity import FirebaseIdentityProvider
        return FirebaseIdentityProvider(settings.google.firebase)
    if backend == "local":
        return LocalIdentityProvider()
    raise ValueError(f"未知的身份后端: {backend}")


__all__ = ["Identity", "IdentityProvider", "LocalIdentityProvider", "build_identity_provider"]
