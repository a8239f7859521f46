"""
TokenIssuer
===========

Builds a not-yet-persisted :class:`Respondent` holding a token that no
existing respondent of the survey holds. The pre-check is an optimization;
the ``(survey_id, token)`` unique constraint stays the final arbiter and the
registrar retries when an insert loses a race.
"""

from __future__ import annotations

import logging

from sqlalchemy.exc import SQLAlchemyError

from surveyadmin.models.respondent import Respondent
from surveyadmin.repositories.respondent import RespondentRepository
from surveyadmin.services._shared.errors import TokenGenerationError
from surveyadmin.services.tokens.generator import RandomStringGenerator

log = logging.getLogger(__name__)

MAX_TOKEN_ATTEMPTS = 4


class TokenIssuer:
    """
    Issue unique respondent tokens for a survey.

    :param respondents: Repository bound to the caller's unit of work.
    :param generator: Token source; defaults to the 9-character token alphabet.
    :param max_attempts: Candidate generations before giving up.
    """

    def __init__(
        self,
        respondents: RespondentRepository,
        generator: RandomStringGenerator | None = None,
        *,
        max_attempts: int = MAX_TOKEN_ATTEMPTS,
    ) -> None:
        self.respondents = respondents
        self.generator = generator or RandomStringGenerator()
        self.max_attempts = max_attempts

    def issue(self, survey_id: int) -> Respondent:
        """
        Return an unsaved, active respondent with a token unused in ``survey_id``.

        :raises TokenGenerationError: When the survey is missing, the lookup
            fails, or every attempt collided.
        """
        try:
            survey = self.respondents.find_survey(survey_id)
        except SQLAlchemyError as exc:
            raise TokenGenerationError(f"Survey lookup failed: {exc.__class__.__name__}") from exc
        if survey is None:
            raise TokenGenerationError(f"Survey not found: {survey_id}")

        for attempt in range(1, self.max_attempts + 1):
            candidate = self.generator.next()
            try:
                taken = self.respondents.token_exists(survey.id, candidate)
            except SQLAlchemyError as exc:
                raise TokenGenerationError(
                    f"Token lookup failed: {exc.__class__.__name__}"
                ) from exc
            if not taken:
                return Respondent(survey=survey, survey_id=survey.id, token=candidate, active=True)
            log.info(
                "Duplicate token for survey %s (attempt %s/%s)",
                survey.id,
                attempt,
                self.max_attempts,
                extra={"survey_id": survey.id},
            )

        raise TokenGenerationError("Unable to generate a unique token")
