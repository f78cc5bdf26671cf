"""
Field extractors shared by the business-area handlers.

Each extractor is a compiled regex with a 'v' group holding the value.
Free-text values (names, categories, addresses) stop at the next field
keyword, an optional 'e'/'com' connector before it, a separator or the end
of the message.
"""
import re

_FLAGS = re.IGNORECASE

FIELD_KEYWORDS = (
    r"nome|chamad[oa]|cpf|cnpj|documento|e-?mail|telefone|fone|celular|"
    r"endere[cç]o|cidade|estado|uf|cep|perfil|fun[cç][aã]o|cargo|role|status|"
    r"pre[cç]o|valor|custo|estoque|quantidade|qtd|sku|c[oó]digo|refer[eê]ncia|"
    r"categoria|departamento|setor|descri[cç][aã]o|desc|id|nov[oa]|para|senha"
)

VALUE_END = rf"(?=\s+(?:(?:e|com)\s+)?(?:{FIELD_KEYWORDS})\b|\s*[,;\n]|\.?\s*$)"
_SEP = r"\b\s*(?::|=|é\b)?\s*"

EMAIL_VALUE = r"[\w.+-]+@[\w-]+(?:\.[\w-]+)+"
_TEXT_VALUE = r"(?!para\b)[^\d\s,;:=][^,;\n]*?"
_NOT_NEW = r"(?<!nov[oa]\s)"


def _rx(source: str) -> "re.Pattern":
    return re.compile(source, _FLAGS)


def _form_line(label: str) -> "re.Pattern":
    return re.compile(rf"^\s*(?:{label})\s*:\s*(?P<v>[^\r\n]+?)\s*$", _FLAGS | re.MULTILINE)


# Form-style input, one "Label: value" per line
FORM_NAME = _form_line("nome")
FORM_DOCUMENT = _form_line(r"cpf|cnpj|documento")
FORM_EMAIL = _form_line(r"e-?mail")
FORM_PHONE = _form_line(r"telefone|celular|fone")
FORM_ADDRESS = _form_line(r"endere[cç]o")
FORM_CITY = _form_line("cidade")
FORM_STATE = _form_line(r"estado|uf")
FORM_ZIP = _form_line("cep")

# Inline values
NAME = _rx(rf"{_NOT_NEW}\b(?:nome|chamad[oa]){_SEP}(?P<v>{_TEXT_VALUE}){VALUE_END}")
NEW_NAME = _rx(rf"\b(?:nov[oa]\s+nome|nome\s+para|renomear\s+para){_SEP}(?P<v>{_TEXT_VALUE}){VALUE_END}")
EMAIL = _rx(rf"{_NOT_NEW}\be-?mail{_SEP}(?P<v>{EMAIL_VALUE})")
NEW_EMAIL = _rx(rf"\b(?:nov[oa]\s+e-?mail|e-?mail\s+para){_SEP}(?P<v>{EMAIL_VALUE})")
ANY_EMAIL = _rx(rf"(?P<v>{EMAIL_VALUE})")
DOCUMENT = _rx(rf"{_NOT_NEW}\b(?:cpf|cnpj|documento){_SEP}(?P<v>\d[\d./-]*\d|\d)")
NEW_DOCUMENT = _rx(rf"\b(?:nov[oa]\s+(?:cpf|cnpj|documento)|(?:cpf|cnpj|documento)\s+para){_SEP}(?P<v>\d[\d./-]*\d|\d)")
PHONE = _rx(rf"\b(?:telefone|fone|celular|tel){_SEP}(?P<v>\+?\(?\d[\d()\s-]{{6,}}\d)")
ADDRESS = _rx(rf"\bendere[cç]o{_SEP}(?P<v>[^,;\n]+?){VALUE_END}")
CITY = _rx(rf"\bcidade{_SEP}(?P<v>{_TEXT_VALUE}){VALUE_END}")
STATE = _rx(rf"\b(?:estado|uf){_SEP}(?P<v>[a-z]{{2}})\b")
ZIP_CODE = _rx(rf"\bcep{_SEP}(?P<v>\d{{5}}-?\d{{3}})")
ID = _rx(rf"\b(?:id|c[oó]digo\s+do\s+cliente){_SEP}#?(?P<v>[a-z0-9][a-z0-9-]*)")
ACTIVE = _rx(r"\b(?:status\s*(?::|=|para)?\s*|marcar\s+como\s+)(?P<v>ativ[oa]|inativ[oa])\b")

ROLE = _rx(rf"{_NOT_NEW}\b(?:perfil|fun[cç][aã]o|cargo|role)\b\s*(?::|=|é\b|de\b)?\s*(?!para\b)(?P<v>[\wÀ-ÿ]+)")
NEW_ROLE = _rx(
    r"\b(?:nov[oa]\s+(?:perfil|fun[cç][aã]o|cargo)|(?:perfil|fun[cç][aã]o|cargo)\s+para)"
    r"\s*(?::|=|de\b)?\s*(?P<v>[\wÀ-ÿ]+)"
)
NEW_STATUS = _rx(r"\b(?:novo\s+status|status\s+para|marcar\s+como)\s*(?::|=)?\s*(?P<v>[\wÀ-ÿ]+)")
PASSWORD = _rx(rf"\bsenha{_SEP}(?P<v>\S+)")

PRICE = _rx(r"\b(?:pre[cç]o|valor|custo)\b\s*(?::|=|é\b|de\b|para\b)?\s*(?:R\$\s*)?(?P<v>\d+(?:[.,]\d+)*)")
STOCK = _rx(r"\b(?:estoque|quantidade|qtd)\b\s*(?::|=|é\b|de\b|para\b)?\s*(?P<v>\d+)\b")
TARGET_NUMBER = _rx(r"\bpara\s*(?:R\$\s*)?(?P<v>\d+(?:[.,]\d+)*)")
SKU = _rx(rf"\b(?:sku|c[oó]digo|refer[eê]ncia){_SEP}(?P<v>(?!d[oa]\b)[a-z0-9][a-z0-9-]*)")
CATEGORY = _rx(rf"\b(?:categoria|departamento|setor)\b\s*(?::|=|é\b|de\b)?\s*(?P<v>{_TEXT_VALUE}){VALUE_END}")
DESCRIPTION = _rx(rf"\b(?:descri[cç][aã]o|desc){_SEP}(?P<v>[^;\n]+?){VALUE_END}")
