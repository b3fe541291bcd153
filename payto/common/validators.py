"""
Validadores y formateadores específicos para Argentina
"""
import re


def _digits(value: str) -> str:
    return re.sub(r'\D', '', value or '')


def validate_cuit(cuit: str) -> bool:
    """
    Valida CUIT/CUIL argentino.
    - 11 dígitos (se ignoran guiones y espacios)
    - Formato: XX-XXXXXXXX-X
    - Verifica el dígito verificador (módulo 11)
    """
    cleaned = _digits(cuit)

    if len(cleaned) != 11:
        return False

    multiplicadores = [5, 4, 3, 2, 7, 6, 5, 4, 3, 2]
    suma = sum(int(digito) * mult for digito, mult in zip(cleaned[:10], multiplicadores))

    digito_calculado = 11 - (suma % 11)
    if digito_calculado == 11:
        digito_calculado = 0
    elif digito_calculado == 10:
        digito_calculado = 9

    return digito_calculado == int(cleaned[10])


def validate_dni(dni: str) -> bool:
    """
    Valida DNI argentino.
    - Entre 7 y 8 dígitos (se ignoran puntos)
    """
    cleaned = _digits(dni)
    return 7 <= len(cleaned) <= 8


def validate_cbu(cbu: str) -> bool:
    """
    Valida CBU: exactamente 22 dígitos
    """
    cleaned = (cbu or '').strip()
    return len(cleaned) == 22 and cleaned.isdigit()


def validate_invoice_number(number: str) -> bool:
    """
    Valida número de comprobante: punto de venta + número, 8 a 12 dígitos
    """
    cleaned = _digits(number)
    return 8 <= len(cleaned) <= 12


def validate_phone(phone: str) -> bool:
    """
    Valida teléfono: al menos 8 dígitos
    """
    return len(_digits(phone)) >= 8


def validate_email(email: str) -> bool:
    return bool(re.match(r'^[^\s@]+@[^\s@]+\.[^\s@]+$', email or ''))


def format_cuit(value: str) -> str:
    """
    Formatea CUIT mientras se escribe: XX-XXXXXXXX-X
    """
    numbers = _digits(value)[:11]
    if len(numbers) <= 2:
        return numbers
    if len(numbers) <= 10:
        return f"{numbers[:2]}-{numbers[2:]}"
    return f"{numbers[:2]}-{numbers[2:10]}-{numbers[10:]}"


def format_invoice_number(value: str) -> str:
    """
    Formatea número de comprobante: PPPP-NNNNNNNN
    """
    numbers = _digits(value)[:12]
    if len(numbers) <= 4:
        return numbers
    return f"{numbers[:4]}-{numbers[4:]}"


def format_phone(value: str) -> str:
    """
    Formatea teléfono argentino al formato +54 11 XXXX-XXXX
    """
    numbers = _digits(value)

    # Quitar el código de país si viene
    if numbers.startswith('54'):
        numbers = numbers[2:]

    numbers = numbers[:10]

    if not numbers:
        return ''
    if len(numbers) <= 2:
        return f"+54 {numbers}"
    if len(numbers) <= 6:
        return f"+54 {numbers[:2]} {numbers[2:]}"
    return f"+54 {numbers[:2]} {numbers[2:6]}-{numbers[6:]}"


def max_length_for_document_type(document_type: str) -> int:
    """
    Largo máximo del número según el tipo de documento
    """
    if document_type in ('CUIT', 'CUIL', 'CDI'):
        return 11
    if document_type == 'DNI':
        return 8
    return 20
