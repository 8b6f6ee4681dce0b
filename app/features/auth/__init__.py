from app.features.auth.keycloak import Identity, KeycloakTokenVerifier

__all__ = ["Identity", "KeycloakTokenVerifier"]
