from __future__ import annotations

import eventlet

eventlet.monkey_patch()

import argparse

from review_bomber.configurations import game_config
from review_bomber.server import app

# Each round draws one of these at random. Templates need both {A} and {B}.
THEME_PROMPTS = [
    game_config.ThemePrompt(
        theme="Energy Drinks",
        prompt_template="Don't let your {A} ever cause {B} again!",
    ),
    game_config.ThemePrompt(
        theme="Startup Pitches",
        prompt_template="It's like {A}, but for {B}.",
    ),
    game_config.ThemePrompt(
        theme="Self-Help Books",
        prompt_template="Stop worrying about {A} and start loving {B}.",
    ),
    game_config.ThemePrompt(
        theme="Theme Parks",
        prompt_template="Come for the {A}, stay for the {B}!",
    ),
]


if __name__ == "__main__":
    parser = argparse.ArgumentParser()
    parser.add_argument(
        "--port", type=int, default=8080, help="Port number to listen on"
    )
    parser.add_argument(
        "--themes", type=str, default=None, help="JSON file of theme prompts"
    )
    parser.add_argument(
        "--client-page", type=str, default=None, help="HTML page served at /"
    )
    parser.add_argument(
        "--theme-seconds", type=float, default=10.0, help="Theme phase duration"
    )
    parser.add_argument(
        "--save-rounds", action="store_true", help="Save a CSV recap of each round"
    )
    args = parser.parse_args()

    config = (
        game_config.GameConfig()
        .game(game_id="review_bomber_party")
        .hosting(host="0.0.0.0", port=args.port)
        .themes(theme_prompts=THEME_PROMPTS)
        .timing(theme_duration_seconds=args.theme_seconds)
        .client(client_page=args.client_page)
        .data(save_round_data=args.save_rounds)
    )

    if args.themes is not None:
        config.themes_from_file(args.themes)

    app.run(config)
