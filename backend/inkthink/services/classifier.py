"""Image classifiers used by the anti-cheat check.

A classifier answers one question about a canvas snapshot: is the drawer
sketching, or writing the answer out as text?
"""
import re
from dataclasses import dataclass

from openai import OpenAI

TEXT = 'text'
DRAWING = 'drawing'

PROMPT = (
    "Look at this sketch. The player is supposed to draw '{word}'. "
    "Does it contain written letters or words that spell out the answer? "
    "If it is mostly text/words, respond with 'text'. If it is a drawing, respond with 'drawing'."
)

_DATA_URL_PREFIX = re.compile(r'^data:image/[a-zA-Z0-9.+-]+;base64,')


@dataclass(frozen=True)
class Verdict:
    verdict: str
    description: str = ''

    @property
    def is_text(self) -> bool:
        return self.verdict == TEXT


def as_data_url(snapshot: str) -> str:
    """Turn a snapshot into a data URL.

    Data URLs keep the image type they were sent with. Bare base64 is
    assumed to be PNG, the canvas default.
    """
    snapshot = (snapshot or '').strip()
    if _DATA_URL_PREFIX.match(snapshot):
        return snapshot
    return f"data:image/png;base64,{snapshot}"


def parse_verdict(reply: str) -> Verdict:
    text = (reply or '').strip().lower()
    return Verdict(TEXT if 'text' in text else DRAWING, text)


class NullClassifier:
    """Used when no classifier is configured: every sketch is a drawing."""

    def classify(self, snapshot: str, expected_word: str) -> Verdict:
        return Verdict(DRAWING, 'classifier disabled')


class OpenAIClassifier:

    def __init__(self, api_key: str, model: str = 'gpt-4o-mini', timeout: float = 10.0, client=None):
        self.model = model
        self.client = client or OpenAI(api_key=api_key, timeout=timeout, max_retries=0)

    def classify(self, snapshot: str, expected_word: str) -> Verdict:
        response = self.client.chat.completions.create(
            model=self.model,
            messages=[{
                'role': 'user',
                'content': [
                    {'type': 'text', 'text': PROMPT.format(word=expected_word)},
                    {'type': 'image_url', 'image_url': {'url': as_data_url(snapshot)}},
                ],
            }],
            max_tokens=10,
        )
        return parse_verdict(response.choices[0].message.content)


def build_classifier(config, logger=None):
    api_key = config.get('OPENAI_API_KEY')
    if not api_key:
        if logger is not None:
            logger.warning("OPENAI_API_KEY not set; cheat detection disabled")
        return NullClassifier()
    return OpenAIClassifier(
        api_key,
        model=config.get('CLASSIFIER_MODEL', 'gpt-4o-mini'),
        timeout=float(config.get('CLASSIFIER_TIMEOUT_SEC', 10)),
    )
