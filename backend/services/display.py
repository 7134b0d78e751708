from models.metar import DecodedMetar


def render_parsed(decoded: DecodedMetar) -> str:
    """Parsed record as indented JSON, absent fields left out."""
    return decoded.parsed.model_dump_json(indent=2, by_alias=True, exclude_none=True)


def render_report(decoded: DecodedMetar) -> str:
    """Raw METAR line followed by the decoded record."""
    return f"{decoded.raw}\n\n{render_parsed(decoded)}\n"
