"""
Cálculo de totales de facturas y comprobantes

Usado por la emisión de facturas, la carga manual y la emisión de notas de
crédito/débito. Todo el cálculo es en Decimal; los totales son sumas exactas
y solo la presentación redondea a dos decimales.
"""

from decimal import Decimal
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from payto.core.config import settings
from payto.common.formatting import format_currency
from payto.modules.invoices.schemas import (
    LineItem, Perception, InvoiceTotals, LineTotals, RateTotals,
    PerceptionAmount, TaxRateOption
)

EXEMPT_RATE = Decimal("-1")
NOT_TAXED_RATE = Decimal("-2")

ITEMS_INCOMPLETE_MESSAGE = "Complete todos los ítems correctamente"

STANDARD_VAT_RATES = [
    Decimal("0"), Decimal("2.5"), Decimal("5"), Decimal("10.5"),
    Decimal("21"), Decimal("27"),
]

HUNDRED = Decimal("100")
ZERO = Decimal("0")


def tax_rate_label(rate: Decimal) -> str:
    if rate == EXEMPT_RATE:
        return "Exento"
    if rate == NOT_TAXED_RATE:
        return "No Gravado"
    return f"{rate.normalize():f}%"


def get_standard_argentine_rates() -> List[TaxRateOption]:
    """Alícuotas de IVA ofrecidas en los formularios, más Exento y No Gravado"""
    rates = STANDARD_VAT_RATES + [EXEMPT_RATE, NOT_TAXED_RATE]
    return [TaxRateOption(value=rate, label=tax_rate_label(rate)) for rate in rates]


def validate_items(items: Sequence[LineItem]) -> Optional[str]:
    """
    Validar ítems antes de enviar.

    Devuelve el mensaje de error o None si todos los ítems están completos.
    """
    if not items:
        return ITEMS_INCOMPLETE_MESSAGE
    for item in items:
        if not item.description.strip() or item.quantity <= 0 or item.unit_price <= 0:
            return ITEMS_INCOMPLETE_MESSAGE
    return None


class TotalsCalculator:
    """Helper para calcular totales según la normativa argentina (IVA + percepciones)"""

    def __init__(self, default_tax_rate: Optional[Decimal] = None):
        self.default_tax_rate = (
            default_tax_rate if default_tax_rate is not None else settings.DEFAULT_VAT_RATE
        )

    def effective_rate(self, item: LineItem) -> Decimal:
        return item.tax_rate if item.tax_rate is not None else self.default_tax_rate

    def line_subtotal(self, item: LineItem) -> Decimal:
        """Cantidad x precio, menos el descuento porcentual del ítem"""
        base = item.quantity * item.unit_price
        if item.discount_percentage:
            base = base * (HUNDRED - item.discount_percentage) / HUNDRED
        return base

    def _calculate_tax_amount(self, base_amount: Decimal, tax_rate: Decimal) -> Decimal:
        """
        IVA de una base imponible.

        Exento (-1), No Gravado (-2) y cualquier alícuota negativa no pagan IVA.
        """
        if tax_rate <= ZERO:
            return ZERO
        return base_amount * tax_rate / HUNDRED

    def calculate_lines(self, items: Iterable[LineItem]) -> List[LineTotals]:
        lines = []
        for index, item in enumerate(items):
            rate = self.effective_rate(item)
            subtotal = self.line_subtotal(item)
            tax = self._calculate_tax_amount(subtotal, rate)
            lines.append(LineTotals(
                index=index,
                tax_rate=rate,
                tax_label=tax_rate_label(rate),
                line_subtotal=subtotal,
                line_tax=tax,
                line_total=subtotal + tax
            ))
        return lines

    def calculate_perceptions(
        self,
        perceptions: Iterable[Perception],
        subtotal: Decimal,
        total_taxes: Decimal
    ) -> List[PerceptionAmount]:
        """Cada percepción se calcula sobre subtotal + IVA, de forma independiente"""
        base = subtotal + total_taxes
        return [
            PerceptionAmount(
                type=perception.type,
                name=perception.name,
                rate=perception.rate,
                base_amount=base,
                amount=base * perception.rate / HUNDRED
            )
            for perception in perceptions
        ]

    def calculate_invoice_totals(
        self,
        items: Sequence[LineItem],
        perceptions: Sequence[Perception] = (),
        available_balance: Optional[Decimal] = None,
        currency: Optional[str] = None
    ) -> InvoiceTotals:
        """
        Calcular totales de una factura

        Args:
            items: Ítems en orden de carga
            perceptions: Percepciones aplicadas
            available_balance: Saldo disponible de la factura asociada (notas de crédito)
            currency: Moneda para los montos formateados

        Returns:
            InvoiceTotals con total == subtotal + total_taxes + total_perceptions
        """
        lines = self.calculate_lines(items)
        subtotal = sum((line.line_subtotal for line in lines), ZERO)
        total_taxes = sum((line.line_tax for line in lines), ZERO)

        perception_amounts = self.calculate_perceptions(perceptions, subtotal, total_taxes)
        total_perceptions = sum((p.amount for p in perception_amounts), ZERO)

        total = subtotal + total_taxes + total_perceptions

        exceeds = available_balance is not None and total > available_balance

        return InvoiceTotals(
            subtotal=subtotal,
            total_taxes=total_taxes,
            total_perceptions=total_perceptions,
            total=total,
            lines=lines,
            by_rate=self.group_by_rate(lines),
            perceptions=perception_amounts,
            exceeds_available_balance=exceeds,
            formatted={
                "subtotal": format_currency(subtotal, currency),
                "total_taxes": format_currency(total_taxes, currency),
                "total_perceptions": format_currency(total_perceptions, currency),
                "total": format_currency(total, currency),
            }
        )

    def group_by_rate(self, lines: Iterable[LineTotals]) -> List[RateTotals]:
        """
        Agrupar base imponible e IVA por alícuota, en orden de aparición
        """
        grouped: Dict[Decimal, Tuple[Decimal, Decimal]] = {}
        for line in lines:
            base, tax = grouped.get(line.tax_rate, (ZERO, ZERO))
            grouped[line.tax_rate] = (base + line.line_subtotal, tax + line.line_tax)

        return [
            RateTotals(tax_rate=rate, label=tax_rate_label(rate), base_amount=base, tax_amount=tax)
            for rate, (base, tax) in grouped.items()
        ]
