from __future__ import annotations

import dataclasses
import json
import logging
import os

from review_bomber.configurations import configuration_constants
from review_bomber.utils.sentinels import NotProvided

logger = logging.getLogger(__name__)


@dataclasses.dataclass(frozen=True)
class ThemePrompt:
    """A theme label and the tagline template players fill in.

    The template is expected to contain both ``{A}`` and ``{B}``.
    """

    theme: str
    prompt_template: str

    @classmethod
    def from_dict(cls, data: dict) -> ThemePrompt:
        template = data.get("promptTemplate", data.get("prompt_template", ""))
        return cls(theme=data.get("theme", "") or "", prompt_template=template or "")

    def is_valid(self) -> bool:
        return (
            bool(self.prompt_template)
            and configuration_constants.PLACEHOLDER_A in self.prompt_template
            and configuration_constants.PLACEHOLDER_B in self.prompt_template
        )


class GameConfig:
    def __init__(self):

        # Game
        self.game_id: str = "review_bomber"
        self.title: str = configuration_constants.GAME_TITLE
        self.seed: int | None = None

        # Hosting
        self.host: str = os.environ.get("REVIEW_BOMBER_HOST", "0.0.0.0")
        self.port: int = int(os.environ.get("REVIEW_BOMBER_PORT", 8080))

        # Themes and prompts
        self.theme_prompts: list[ThemePrompt] = []
        self.default_prompt_template: str = configuration_constants.DEFAULT_PROMPT_TEMPLATE

        # Timing
        self.theme_duration_seconds: float = configuration_constants.DEFAULT_THEME_DURATION_S
        self.results_duration_seconds: float = 0.0

        # Voting
        self.star_buttons: list[int] = list(configuration_constants.DEFAULT_STAR_BUTTONS)

        # Client onboarding page served over HTTP
        self.client_page: str | None = None

        # Round recap export
        self.save_round_data: bool = False
        self.data_dir: str = "data"

    def game(
        self,
        game_id: str = NotProvided,
        title: str = NotProvided,
        seed: int | None = NotProvided,
    ) -> GameConfig:
        if game_id is not NotProvided:
            self.game_id = game_id

        if title is not NotProvided:
            self.title = title

        if seed is not NotProvided:
            self.seed = seed

        return self

    def hosting(
        self,
        host: str = NotProvided,
        port: int = NotProvided,
    ) -> GameConfig:
        if host is not NotProvided:
            self.host = host

        if port is not NotProvided:
            assert isinstance(port, int) and 0 < port < 65536, \
                "port must be an integer between 1 and 65535"
            self.port = port

        return self

    def themes(
        self,
        theme_prompts: list[ThemePrompt | dict] = NotProvided,
        default_prompt_template: str = NotProvided,
    ) -> GameConfig:
        """Configure the pool of themes a round is drawn from.

        :param theme_prompts: ThemePrompt objects, or dicts with ``theme`` and
            ``promptTemplate`` keys. An empty list means every round uses the
            built-in default theme.
        :type theme_prompts: list[ThemePrompt | dict], optional
        :param default_prompt_template: Template used when the pool is empty
            or the chosen template is missing ``{A}`` or ``{B}``.
        :type default_prompt_template: str, optional
        :return: The GameConfig instance (self)
        :rtype: GameConfig
        """
        if theme_prompts is not NotProvided:
            assert isinstance(theme_prompts, list), "theme_prompts must be a list"
            self.theme_prompts = [
                tp if isinstance(tp, ThemePrompt) else ThemePrompt.from_dict(tp)
                for tp in theme_prompts
            ]
            invalid = [tp.theme for tp in self.theme_prompts if not tp.is_valid()]
            if invalid:
                logger.warning(
                    f"Theme prompts missing {{A}} or {{B}} will fall back to the "
                    f"default template: {invalid}"
                )

        if default_prompt_template is not NotProvided:
            assert ThemePrompt("", default_prompt_template).is_valid(), \
                "default_prompt_template must contain both {A} and {B}"
            self.default_prompt_template = default_prompt_template

        return self

    def themes_from_file(self, filepath: str) -> GameConfig:
        """Load theme prompts from a JSON list of ``{"theme", "promptTemplate"}`` objects."""
        with open(filepath, "r", encoding="utf-8") as f:
            data = json.load(f)

        if isinstance(data, dict):
            data = data.get("themePrompts", [])

        logger.info(f"Loaded {len(data)} theme prompts from {filepath}")
        return self.themes(theme_prompts=data)

    def timing(
        self,
        theme_duration_seconds: float = NotProvided,
        results_duration_seconds: float = NotProvided,
    ) -> GameConfig:
        if theme_duration_seconds is not NotProvided:
            assert theme_duration_seconds >= 0, "theme_duration_seconds must be non-negative"
            self.theme_duration_seconds = theme_duration_seconds

        if results_duration_seconds is not NotProvided:
            assert results_duration_seconds >= 0, "results_duration_seconds must be non-negative"
            self.results_duration_seconds = results_duration_seconds

        return self

    def voting(self, star_buttons: list[int] = NotProvided) -> GameConfig:
        if star_buttons is not NotProvided:
            assert len(star_buttons) > 0, "star_buttons must not be empty"
            assert all(isinstance(s, int) for s in star_buttons), \
                "star_buttons must be integers"
            self.star_buttons = list(star_buttons)

        return self

    def client(self, client_page: str | None = NotProvided) -> GameConfig:
        if client_page is not NotProvided:
            self.client_page = client_page

        return self

    def data(
        self,
        save_round_data: bool = NotProvided,
        data_dir: str = NotProvided,
    ) -> GameConfig:
        if save_round_data is not NotProvided:
            self.save_round_data = save_round_data

        if data_dir is not NotProvided:
            self.data_dir = data_dir

        return self

    def default_theme_prompt(self) -> ThemePrompt:
        return ThemePrompt(
            theme=configuration_constants.DEFAULT_THEME,
            prompt_template=self.default_prompt_template,
        )
