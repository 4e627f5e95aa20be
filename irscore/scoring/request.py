"""Per-query scoring parameters.

The host passes a flat parameter map with each query. ``ScoringParameters``
parses it (types, defaults, ranges) and ``ScoringRequest.from_params``
checks which parameters the selected scorer needs, then freezes the result.
A ``ScoringRequest`` is built once per query and shared read-only by every
document and thread scored under that query.

Host parameter names:

| name                 | used by                         |
|----------------------|---------------------------------|
| ``field``            | all scorers                     |
| ``word_count_field`` | all scorers                     |
| ``terms``            | query likelihood, BM25          |
| ``query_model``      | both KL divergence scorers      |
| ``lambda``           | query likelihood, KL (union)    |
| ``word_count_average`` | BM25, must be > 0             |
| ``k1``, ``b``        | BM25 (defaults 1.2 and 0.75)    |
| ``max_field_length`` | query likelihood, KL (union)    |
| ``verbose``          | all scorers, tracing only       |
"""

import math
from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, StrictStr, ValidationError, field_validator

from irscore.errors import ScoringConfigurationError

DEFAULT_K1 = 1.2
DEFAULT_B = 0.75


class ScorerKind(Enum):
    """Scorer names as registered with the host engine."""
    QUERY_LIKELIHOOD = "qle_model_script_score"
    BM25 = "temp_sum_bm25_script_score"
    KL_DIVERGENCE = "kullback_leibler_script_score"
    KL_QUERY_MODEL = "kullback_leibler_query_model_script_score"


REQUIRED_PARAMETERS: Dict[ScorerKind, Tuple[str, ...]] = {
    ScorerKind.QUERY_LIKELIHOOD: ("field", "word_count_field", "terms", "lambda"),
    ScorerKind.BM25: ("field", "word_count_field", "terms", "word_count_average"),
    ScorerKind.KL_DIVERGENCE: ("field", "word_count_field", "query_model", "lambda"),
    ScorerKind.KL_QUERY_MODEL: ("field", "word_count_field", "query_model"),
}


class ScoringParameters(BaseModel):
    """Raw query parameters as sent by the host, typed and range-checked.

    Every parameter is optional here; which ones are required depends on
    the scorer and is checked by ``ScoringRequest.from_params``.
    """

    model_config = ConfigDict(extra="ignore", populate_by_name=True, frozen=True)

    field: Optional[StrictStr] = None
    word_count_field: Optional[StrictStr] = None
    terms: Optional[List[StrictStr]] = None
    query_model: Optional[Dict[StrictStr, float]] = None
    lambda_: Optional[float] = Field(default=None, alias="lambda", ge=0.0, le=1.0)
    word_count_average: Optional[float] = Field(default=None, allow_inf_nan=False)
    max_field_length: int = 0
    k1: float = Field(default=DEFAULT_K1, ge=0.0, allow_inf_nan=False)
    b: float = Field(default=DEFAULT_B, ge=0.0, le=1.0)
    verbose: bool = False

    @field_validator("query_model")
    @classmethod
    def _check_probabilities(cls, value: Optional[Dict[str, float]]) -> Optional[Dict[str, float]]:
        if value is None:
            return value
        for term, probability in value.items():
            if not math.isfinite(probability) or probability < 0.0:
                raise ValueError(f"query_model probability for {term!r} must be finite and >= 0")
        return value


@dataclass(frozen=True)
class ScoringRequest:
    """Validated, immutable configuration for one query."""

    kind: ScorerKind
    field: str
    doc_length_field: str
    terms: Optional[Tuple[str, ...]] = None
    query_model: Optional[Mapping[str, float]] = None
    lambda_: Optional[float] = None
    average_doc_length: Optional[float] = None
    max_field_length: int = 0
    k1: float = DEFAULT_K1
    b: float = DEFAULT_B
    verbose: bool = False

    @property
    def length_guard_enabled(self) -> bool:
        return self.max_field_length > 0

    @classmethod
    def from_params(cls, params: Mapping[str, Any], kind: ScorerKind) -> "ScoringRequest":
        """Validate host parameters for ``kind`` and build a request.

        Raises ``ScoringConfigurationError`` if a parameter the scorer needs
        is missing, has the wrong type, or is out of range.
        """
        if not isinstance(params, Mapping):
            raise ScoringConfigurationError(
                f"cannot initialize {kind.value}: parameters must be a mapping, "
                f"got {type(params).__name__}"
            )

        try:
            parsed = ScoringParameters.model_validate(dict(params))
        except ValidationError as e:
            raise ScoringConfigurationError(f"cannot initialize {kind.value}: {e}") from e

        values = parsed.model_dump(by_alias=True)
        missing = [
            name for name in REQUIRED_PARAMETERS[kind]
            if values.get(name) is None or values.get(name) == ""
        ]
        if missing:
            raise ScoringConfigurationError(
                f"cannot initialize {kind.value}: missing parameter(s) {', '.join(missing)}"
            )

        if kind is ScorerKind.BM25 and parsed.word_count_average <= 0:
            raise ScoringConfigurationError(
                f"cannot initialize {kind.value}: word_count_average must be > 0, "
                f"got {parsed.word_count_average}"
            )

        return cls(
            kind=kind,
            field=parsed.field,
            doc_length_field=parsed.word_count_field,
            terms=tuple(parsed.terms) if parsed.terms is not None else None,
            query_model=(
                MappingProxyType(dict(parsed.query_model))
                if parsed.query_model is not None else None
            ),
            lambda_=parsed.lambda_,
            average_doc_length=parsed.word_count_average,
            max_field_length=parsed.max_field_length,
            k1=parsed.k1,
            b=parsed.b,
            verbose=parsed.verbose,
        )

    def describe(self) -> Dict[str, Any]:
        """Loggable summary; term lists are reduced to their sizes."""
        return {
            "scorer": self.kind.value,
            "field": self.field,
            "doc_length_field": self.doc_length_field,
            "terms": len(self.terms) if self.terms is not None else None,
            "query_model_terms": len(self.query_model) if self.query_model is not None else None,
            "lambda": self.lambda_,
            "average_doc_length": self.average_doc_length,
            "max_field_length": self.max_field_length,
            "k1": self.k1,
            "b": self.b,
        }
