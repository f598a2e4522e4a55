from password_gateway.models.user import Domain, User

__all__ = ["Domain", "User"]
