"""Memo templating for payment requests."""

from dataclasses import dataclass

AMOUNT_PLACEHOLDER = "$amt"


def render(template: str, amount: int) -> str:
    """Render a memo by substituting the amount into ``template``.

    Every occurrence of ``$amt`` is replaced by the decimal digits of
    ``amount``; nothing else in the template is interpreted.

    Example:
        >>> render("Candy for $amt sat", 100)
        'Candy for 100 sat'
    """
    return template.replace(AMOUNT_PLACEHOLDER, str(amount))


@dataclass(frozen=True)
class MemoFormatter:
    """Memo template fixed at startup."""

    template: str

    def render(self, amount: int) -> str:
        return render(self.template, amount)

    @property
    def has_placeholder(self) -> bool:
        return AMOUNT_PLACEHOLDER in self.template
