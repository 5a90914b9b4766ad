import click


def validate_stage_names(ctx: click.Context, param, value):
    """
    Normalize repeated ``--enable``/``--disable`` values into a frozenset.

    Stage names are compared in lower case with dashes folded to underscores, so
    ``--enable report-greetings`` and ``--enable report_greetings`` are equivalent.
    """
    if not value:
        return frozenset()
    return frozenset(name.strip().lower().replace("-", "_") for name in value)


def validate_card_data(ctx: click.Context, param, value):
    """
    Decode hexadecimal card data passed on the command line.

    Returns:
        bytes: The decoded bytes, empty when the option is not given.
    """
    if not value:
        return b""
    cleaned = value[2:] if value.lower().startswith("0x") else value
    try:
        return bytes.fromhex(cleaned)
    except ValueError:
        raise click.BadParameter(f"Invalid hex data: {value}")
