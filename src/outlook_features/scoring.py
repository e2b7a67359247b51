"""Remote scoring service client.

Objective:
    Send a fixed subset of a message's features to a request/response scoring
    endpoint and return the predicted value.

Responsibilities:
    - Select and stringify the 9 features the model was trained on
      (:func:`build_feature_vector`).
    - Build the request body (:meth:`ScoringClient.build_request`).
    - POST it with a bearer token (via :mod:`requests`).
    - Parse the prediction from the response body.

High-level call tree:
    - :meth:`ScoringClient.score` -> returns ``Optional[float]``
        - :meth:`ScoringClient.build_request`
        - ``requests.post``
        - :meth:`ScoringClient._parse_prediction`

Protocol:
    - ``POST <scoring_base_address>`` with ``Authorization: Bearer <key>``
    - Body: ``{"Id": "score00001", "Instance": {"FeatureVector": {...},
      "GlobalParameters": {}}}``
    - Response: JSON array of strings; element 9 is the prediction.

Error handling:
    - Non-2xx responses are logged and yield ``None``.
    - Malformed success bodies raise :class:`ScoringResponseError` internally;
      they yield ``None`` unless ``strict_scoring_responses`` is set, in which
      case the error propagates.
    - Transport errors (``requests.RequestException``) propagate.
"""

import logging
from typing import Any, Optional

import requests

from .config import Settings
from .models import FeatureRecord, ScoreData, ScoreRequest

logger = logging.getLogger(__name__)

FEATURE_VECTOR_KEYS = (
    "TestFolder",
    "HasAttachments",
    "SentDirect",
    "MayContainATime",
    "ReceivedHour",
    "SubjectWordCount",
    "SenderDomain",
    "HasCC",
    "SpecialCharacterCount",
)

PREDICTION_INDEX = 9


class ScoringResponseError(ValueError):
    """Raised when a successful scoring response has an unusable body."""


def _feature_text(value: Any) -> str:
    if isinstance(value, bool):
        return "1" if value else "0"
    return str(value)


def build_feature_vector(record: FeatureRecord) -> dict[str, str]:
    """Select the scored features from a record.

    Booleans are rendered as ``"1"``/``"0"``; everything else uses its
    ``str()`` form.

    Args:
        record: Full feature record.

    Returns:
        dict[str, str]: Exactly the keys of :data:`FEATURE_VECTOR_KEYS`.

    Raises:
        KeyError: If the record lacks one of the scored features.
    """
    return {key: _feature_text(record[key]) for key in FEATURE_VECTOR_KEYS}


class ScoringClient:
    """
    Client for the request/response scoring endpoint.

    Attributes:
        settings: Application settings (endpoint, API key, timeout).
    """

    def __init__(self, settings: Settings) -> None:
        """
        Initialize the scoring client.

        Args:
            settings: Application settings.

        Raises:
            ValueError: If no scoring base address is configured.
        """
        if not settings.scoring_base_address:
            raise ValueError("SCORING_BASE_ADDRESS must be set to score records")
        self.settings = settings

    def build_request(self, feature_vector: dict[str, str]) -> ScoreRequest:
        """Wrap a feature vector in the scoring request envelope."""
        return ScoreRequest(
            instance=ScoreData(feature_vector=feature_vector, global_parameters={})
        )

    def _get_headers(self) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {self.settings.scoring_api_key}",
            "Content-Type": "application/json",
        }

    def _parse_prediction(self, response: requests.Response) -> float:
        """Read the prediction from a successful response.

        Args:
            response: 2xx response from the scoring service.

        Returns:
            float: Value of element :data:`PREDICTION_INDEX`.

        Raises:
            ScoringResponseError: If the body is not a JSON array with a numeric
                token at the prediction index.
        """
        try:
            tokens = response.json()
        except ValueError as e:
            raise ScoringResponseError(f"Response body is not JSON: {e}") from e

        if not isinstance(tokens, list):
            raise ScoringResponseError(
                f"Expected a JSON array, got {type(tokens).__name__}"
            )
        if len(tokens) <= PREDICTION_INDEX:
            raise ScoringResponseError(
                f"Expected at least {PREDICTION_INDEX + 1} tokens, got {len(tokens)}"
            )

        token = tokens[PREDICTION_INDEX]
        try:
            return float(token)
        except (TypeError, ValueError) as e:
            raise ScoringResponseError(
                f"Token {PREDICTION_INDEX} is not numeric: {token!r}"
            ) from e

    def score(self, feature_vector: dict[str, str]) -> Optional[float]:
        """Request a prediction for one feature vector.

        Args:
            feature_vector: Output of :func:`build_feature_vector`.

        Returns:
            Optional[float]: The prediction, or ``None`` when the service
            answered with a non-success status or an unusable body.

        Raises:
            ScoringResponseError: Only when ``strict_scoring_responses`` is set.
            requests.RequestException: On transport failures.
        """
        score_request = self.build_request(feature_vector)

        response = requests.post(
            self.settings.scoring_base_address,
            headers=self._get_headers(),
            json=score_request.model_dump(by_alias=True),
            timeout=self.settings.scoring_timeout,
        )

        if not response.ok:
            logger.error(
                f"Scoring failed with status code: {response.status_code} - {response.text}"
            )
            return None

        try:
            return self._parse_prediction(response)
        except ScoringResponseError as e:
            if self.settings.strict_scoring_responses:
                logger.error(f"Malformed scoring response: {e}")
                raise
            logger.warning(f"Malformed scoring response; prediction left empty: {e}")
            return None
