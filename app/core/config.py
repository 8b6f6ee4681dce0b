import os
from dotenv import load_dotenv

# Load environment variables
load_dotenv()

_KEYCLOAK_URL = (os.getenv('KEYCLOAK_URL') or '').rstrip('/')
_KEYCLOAK_REALM = os.getenv('KEYCLOAK_REALM')

_SUPABASE_URL = os.getenv('SUPABASE_URL')
_SUPABASE_KEY = os.getenv('SUPABASE_KEY')

_LLM_PROVIDER = os.getenv('LLM_PROVIDER', 'anthropic').strip().lower()

_ANTHROPIC_API_KEY = os.getenv('ANTHROPIC_API_KEY') or os.getenv('CLAUDE_API_KEY')

_CLAUDE_MODEL_PRIMARY = os.getenv('CLAUDE_MODEL_PRIMARY') or os.getenv('CLAUDE_MODEL', 'claude-sonnet-4-5-20250929')
_CLAUDE_MODEL_FALLBACKS = [
    model.strip()
    for model in os.getenv('CLAUDE_MODEL_FALLBACKS', 'claude-3-5-haiku-20241022').split(',')
    if model.strip()
]
_CLAUDE_MODEL_OPTIONS = [_CLAUDE_MODEL_PRIMARY] + [m for m in _CLAUDE_MODEL_FALLBACKS if m and m != _CLAUDE_MODEL_PRIMARY]

_OPENAI_API_KEY = os.getenv('OPENAI_API_KEY')
_OPENAI_MODEL = os.getenv('OPENAI_MODEL', 'gpt-4o-mini')

_CORS_ORIGINS = [
    origin.strip()
    for origin in os.getenv('CORS_ORIGINS', '*').split(',')
    if origin.strip()
]


class Config:
    """Central configuration for the journal service."""

    KEYCLOAK_URL = _KEYCLOAK_URL
    KEYCLOAK_REALM = _KEYCLOAK_REALM
    JWKS_CACHE_SECONDS = int(os.getenv('JWKS_CACHE_SECONDS', '86400'))

    SUPABASE_URL = _SUPABASE_URL
    SUPABASE_KEY = _SUPABASE_KEY
    DATABASE_URL = os.getenv('DATABASE_URL')

    LLM_PROVIDER = _LLM_PROVIDER
    LLM_TIMEOUT_SECONDS = float(os.getenv('LLM_TIMEOUT_SECONDS', '30'))

    ANTHROPIC_API_KEY = _ANTHROPIC_API_KEY

    CLAUDE_MODEL_PRIMARY = _CLAUDE_MODEL_PRIMARY
    CLAUDE_MODEL_FALLBACKS = _CLAUDE_MODEL_FALLBACKS
    CLAUDE_MODEL_OPTIONS = _CLAUDE_MODEL_OPTIONS

    OPENAI_API_KEY = _OPENAI_API_KEY
    OPENAI_MODEL = _OPENAI_MODEL

    HISTORY_LIMIT = int(os.getenv('HISTORY_LIMIT', '30'))
    DASHBOARD_LIMIT = int(os.getenv('DASHBOARD_LIMIT', '10'))
    MAX_HISTORY_LIMIT = int(os.getenv('MAX_HISTORY_LIMIT', '365'))

    CORS_ORIGINS = _CORS_ORIGINS

    SERVICE_NAME = os.getenv('SERVICE_NAME', 'qjournal-service')

    @property
    def KEYCLOAK_ISSUER(self) -> str:
        if not self.KEYCLOAK_URL or not self.KEYCLOAK_REALM:
            return ''
        return f"{self.KEYCLOAK_URL}/realms/{self.KEYCLOAK_REALM}"

    @property
    def KEYCLOAK_JWKS_URL(self) -> str:
        issuer = self.KEYCLOAK_ISSUER
        return f"{issuer}/protocol/openid-connect/certs" if issuer else ''


settings = Config()
