from passlib.context import CryptContext

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


# ─── Password hashing ──────────────────────────────────
class PasswordHasher:
    """The narrow hashing contract the tenancy registry depends on."""

    def __init__(self, context: CryptContext = pwd_context):
        self._context = context

    def hash(self, plain: str) -> str:
        return self._context.hash(plain)

    def verify(self, plain: str, digest: str) -> bool:
        return self._context.verify(plain, digest)
