from passlib.context import CryptContext
import os
import re

# Configure bcrypt rounds explicitly for predictable performance.
# Defaults to 11 rounds unless overridden via BCRYPT_ROUNDS env var.
_BCRYPT_ROUNDS = int(os.getenv("BCRYPT_ROUNDS", "11") or 11)
pwd_context = CryptContext(
    schemes=["bcrypt"],
    deprecated="auto",
    bcrypt__rounds=_BCRYPT_ROUNDS,
)

PASSWORD_MIN_LENGTH = 8
PASSWORD_MAX_LENGTH = 255
_LOWER = re.compile(r"[a-z]")
_UPPER = re.compile(r"[A-Z]")
_DIGIT = re.compile(r"\d")


def get_password_hash(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return pwd_context.verify(plain_password, hashed_password)


def password_problems(password: str) -> list[str]:
    """Return the list of unmet password rules (empty when acceptable)."""
    problems: list[str] = []
    if len(password) < PASSWORD_MIN_LENGTH:
        problems.append(f"at least {PASSWORD_MIN_LENGTH} characters")
    if len(password) > PASSWORD_MAX_LENGTH:
        problems.append(f"at most {PASSWORD_MAX_LENGTH} characters")
    if not _LOWER.search(password):
        problems.append("a lowercase letter")
    if not _UPPER.search(password):
        problems.append("an uppercase letter")
    if not _DIGIT.search(password):
        problems.append("a digit")
    return problems


def normalize_email(email: str) -> str:
    """Return a normalized email address for comparison and storage.

    Gmail addresses are canonicalized so aliases like "user+tag@googlemail.com"
    and "u.s.e.r@gmail.com" resolve to the same account.
    """

    email = email.strip().lower()
    local, _, domain = email.partition("@")

    if domain in {"gmail.com", "googlemail.com"}:
        domain = "gmail.com"
        local = local.split("+", 1)[0].replace(".", "")

    return f"{local}@{domain}"
