"""
Token Authority service for engineer links and short codes.
"""

import hmac
import re
import secrets
from typing import Optional

from src.application.interfaces.repositories import JobRepositoryInterface
from src.config.logging import get_logger
from src.config.settings import settings
from src.domain.entities.job import Job
from src.domain.exceptions.token_error import TokenInvalid

logger = get_logger(__name__)

# No 0/O or 1/I/L so codes survive being read aloud or retyped
SHORT_CODE_ALPHABET = "ABCDEFGHJKMNPQRSTUVWXYZ23456789"


def tokens_match(expected: Optional[str], presented: Optional[str]) -> bool:
    """Constant-time token comparison."""
    if not expected or not presented:
        return False
    return hmac.compare_digest(expected.encode(), presented.encode())


class TokenAuthority:
    """Mints and resolves the capabilities that identify a job.

    The engineer token is minted once, at job creation, and there is no
    rotation: a lost link is re-sent, never regenerated.
    """

    def __init__(
        self,
        job_repo: JobRepositoryInterface,
        engineer_token_bytes: int = None,
        job_token_bytes: int = None,
        short_code_length: int = None,
        max_short_code_attempts: int = None,
    ):
        self.job_repo = job_repo
        self.engineer_token_bytes = engineer_token_bytes or settings.ENGINEER_TOKEN_BYTES
        self.job_token_bytes = job_token_bytes or settings.JOB_TOKEN_BYTES
        self.short_code_length = short_code_length or settings.SHORT_CODE_LENGTH
        self.max_short_code_attempts = (
            max_short_code_attempts or settings.SHORT_CODE_MAX_ATTEMPTS
        )
        self._engineer_token_pattern = re.compile(
            rf"^[0-9a-f]{{{self.engineer_token_bytes * 2}}}$"
        )
        self._short_code_pattern = re.compile(
            rf"^[{SHORT_CODE_ALPHABET}]{{{self.short_code_length}}}$"
        )

    def mint_engineer_token(self) -> str:
        """High-entropy hex token used as the engineer's only credential."""
        return secrets.token_hex(self.engineer_token_bytes)

    def mint_job_token(self) -> str:
        """URL-safe token for customer/admin facing links."""
        return secrets.token_urlsafe(self.job_token_bytes)

    async def mint_short_code(self) -> str:
        """Short alias for the engineer link, unique across jobs."""
        for attempt in range(1, self.max_short_code_attempts + 1):
            code = "".join(
                secrets.choice(SHORT_CODE_ALPHABET)
                for _ in range(self.short_code_length)
            )
            if await self.job_repo.get_by_short_code(code) is None:
                return code

            logger.warning("Short code collision", attempt=attempt)

        raise RuntimeError(
            f"Could not allocate a unique short code after "
            f"{self.max_short_code_attempts} attempts"
        )

    def is_well_formed_engineer_token(self, token: Optional[str]) -> bool:
        return bool(token) and bool(self._engineer_token_pattern.match(token))

    def is_well_formed_short_code(self, code: Optional[str]) -> bool:
        return bool(code) and bool(self._short_code_pattern.match(code))

    async def resolve_engineer_token(self, token: Optional[str]) -> Job:
        """Return the job bound to an engineer token or raise TokenInvalid."""
        if not self.is_well_formed_engineer_token(token):
            logger.info("Rejected malformed engineer token")
            raise TokenInvalid()

        job = await self.job_repo.get_by_engineer_token(token)
        if job is None or not tokens_match(job.engineer_token, token):
            logger.info("Rejected unknown engineer token")
            raise TokenInvalid()

        return job

    async def resolve_short_code(self, code: Optional[str]) -> Job:
        """Return the job a short code points at or raise TokenInvalid."""
        normalised = code.strip().upper() if code else code
        if not self.is_well_formed_short_code(normalised):
            logger.info("Rejected malformed short code")
            raise TokenInvalid()

        job = await self.job_repo.get_by_short_code(normalised)
        if job is None or not job.engineer_token:
            logger.info("Rejected unknown short code")
            raise TokenInvalid()

        return job

    def engineer_link(self, job: Job, base_url: Optional[str] = None) -> str:
        """Public engineer link, preferring the short form."""
        base = (base_url or settings.PUBLIC_BASE_URL).rstrip("/")
        if job.short_code:
            return f"{base}/e/{job.short_code}"
        return f"{base}/engineer/job/{job.engineer_token}"
