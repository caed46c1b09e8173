import logging
import re
from pathlib import Path
from typing import Mapping, Sequence, Union

logger = logging.getLogger(__name__)


def replace_all_substrings(
    words: Sequence[Mapping[str, str]],
    text: str,
    regex: bool = False,
) -> str:
    """
    Replace every occurrence of each token in ``text`` with its value.

    Replacements are applied one after the other in the order given, so a
    later entry sees the output of the earlier ones::

        >>> replace_all_substrings([{"man": "boy"}, {"woman": "girl"}],
        ...                        "The woman and man and woman and man")
        'The woboy and boy and woboy and boy'

    Args:
        words: Ordered single-entry mappings of ``{token: value}``. Only the
            first key of each mapping is used; empty mappings and
            entries that are not mappings are skipped.
        text: Source text to transform.
        regex: Treat each token as a regular expression instead of a
            literal string. Values are always inserted verbatim and
            malformed patterns are skipped.

    Returns:
        str: The transformed text.
    """
    result = text
    for entry in words:
        if not isinstance(entry, Mapping) or not entry:
            continue
        token = next(iter(entry))
        value = entry[token]
        if regex:
            try:
                pattern = re.compile(token)
            except re.error as e:
                logger.debug("Skipping malformed pattern %r: %s", token, e)
                continue
            result = pattern.sub(lambda _match: value, result)
        else:
            result = result.replace(token, value)
    return result


def load_template(path: Union[str, Path]) -> str:
    """Read a UTF-8 template file. Errors propagate to the caller."""
    template_path = Path(path)
    logger.debug("Reading template %s", template_path)
    return template_path.read_text(encoding="utf-8")
