"""Masking helpers for customer names and identity documents shown in the explorer."""


def censor_name(full_name):
    """Keep the first word; mask the rest after their first letter (short words stay)."""
    if not full_name:
        return ""
    words = full_name.split(" ")
    masked = [words[0]]
    for word in words[1:]:
        if len(word) <= 2:
            masked.append(word)
        else:
            masked.append(word[:1] + "*" * (len(word) - 1))
    return " ".join(masked)


def _mask_middle(value):
    return value[:2] + "*" * (len(value) - 4) + value[-2:]


def censor_id_document(doc):
    """V-12345678 -> V-12****78, 12345678 -> 12****78. Short values are left alone."""
    if not doc:
        return ""
    doc = str(doc)

    if "-" in doc:
        parts = doc.split("-")
        prefix, number = parts[0], parts[1]
        if not number or len(number) <= 4:
            return doc
        return f"{prefix}-{_mask_middle(number)}"

    if len(doc) <= 4:
        return doc
    return _mask_middle(doc)
