"""Declaration-site validation of return-value annotations."""

from __future__ import annotations

from .models import KIND_FUNCTION, Finding, Symbol
from .policy import AnnotationPolicy, short_name


VOID_TYPES = {"None", "NoneType", "types.NoneType"}

BOTH_ERROR = "@{check} and @{ignore} cannot both be applied to the same {kind}"
VOID_ERROR = "@{name} may not be applied to void-returning methods"


def is_void_type(annotation: str | None) -> bool:
    """True for ``None`` and its type, quoted or not; a missing annotation is not void."""
    if annotation is None:
        return False
    text = annotation.strip()
    if len(text) >= 2 and text[0] == text[-1] and text[0] in "'\"":
        text = text[1:-1].strip()
    return text in VOID_TYPES


class DeclarationValidator:
    def __init__(self, policy: AnnotationPolicy) -> None:
        self.policy = policy

    def conflict(self, symbol: Symbol, kind: str) -> tuple[Finding, str] | None:
        check = self.policy.check_annotation(symbol)
        if check is None or not self.policy.can_ignore(symbol):
            return None
        message = BOTH_ERROR.format(
            check=short_name(check), ignore=short_name(self.policy.ignore_name), kind=kind
        )
        return Finding.CONFLICTING_ANNOTATIONS, message

    def validate_method(self, symbol: Symbol) -> tuple[Finding, str] | None:
        """Finding and message for a misused annotation on a function, or None.

        Both annotations at once is reported before, and instead of, any
        void-return misuse.
        """
        conflict = self.conflict(symbol, "method")
        if conflict is not None:
            return conflict

        annotation = self.policy.check_annotation(symbol)
        if annotation is None and self.policy.can_ignore(symbol):
            annotation = self.policy.ignore_name
        if annotation is None:
            return None
        # Constructors implicitly return None; they are not procedures.
        if symbol.kind != KIND_FUNCTION:
            return None
        if not is_void_type(symbol.returns):
            return None
        return Finding.MISPLACED_ON_VOID, VOID_ERROR.format(name=short_name(annotation))

    def validate_class(self, symbol: Symbol) -> tuple[Finding, str] | None:
        return self.conflict(symbol, "class")
