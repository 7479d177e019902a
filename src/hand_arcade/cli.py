"""HandArcade command line entry point.

Usage:
    hand-arcade games               List the available games
    hand-arcade play GAME           Play a game in an OpenCV window
    hand-arcade serve               Start the WebSocket render server
    hand-arcade simulate GAME       Run a game on synthetic hands
"""

from __future__ import annotations

import asyncio
import logging
import re
from typing import Optional

import typer

from hand_arcade.config import ArcadeConfig, SessionSettings
from hand_arcade.games import GAME_TYPES, create_game
from hand_arcade.render import DrawCommand

app = typer.Typer(
    name="hand-arcade",
    help="🖐 Hand-tracked minigames for a webcam.",
    add_completion=False,
)

_NAMED_COLORS = {
    "white": (255, 255, 255),
    "black": (0, 0, 0),
    "yellow": (255, 255, 0),
    "green": (0, 128, 0),
    "red": (255, 0, 0),
}

_RGBA = re.compile(r"rgba?\(\s*(\d+)\s*,\s*(\d+)\s*,\s*(\d+)")


def to_bgr(color: Optional[str]) -> Optional[tuple[int, int, int]]:
    """Parse a CSS color (name, #rrggbb, rgb()/rgba()) into an OpenCV BGR tuple.

    Alpha is dropped. Unknown colors give ``None``.
    """
    if not color:
        return None
    color = color.strip().lower()
    if color in _NAMED_COLORS:
        r, g, b = _NAMED_COLORS[color]
    elif color.startswith("#") and len(color) == 7:
        r, g, b = (int(color[i:i + 2], 16) for i in (1, 3, 5))
    else:
        match = _RGBA.match(color)
        if not match:
            return None
        r, g, b = (int(v) for v in match.groups())
    return b, g, r


def draw_commands(image, commands: list[DrawCommand]):
    """Paint draw commands onto a BGR image in place."""
    import cv2
    import numpy as np

    for cmd in commands:
        fill = to_bgr(cmd.fill)
        stroke = to_bgr(cmd.stroke)
        width = max(1, int(cmd.line_width))
        center = (int(cmd.x), int(cmd.y))

        if cmd.type == "circle":
            if fill is not None:
                cv2.circle(image, center, int(cmd.radius), fill, -1)
            if stroke is not None:
                cv2.circle(image, center, int(cmd.radius), stroke, width)
        elif cmd.type == "rect" and stroke is not None:
            corner = (int(cmd.x + cmd.size), int(cmd.y + cmd.size))
            cv2.rectangle(image, center, corner, stroke, width)
        elif cmd.type == "polyline" and stroke is not None and len(cmd.points) > 1:
            pts = np.array(cmd.points, dtype=np.int32).reshape(-1, 1, 2)
            cv2.polylines(image, [pts], False, stroke, width)
        elif cmd.type == "keypoint":
            cv2.circle(image, center, int(cmd.radius or 6), fill or (0, 159, 255), -1)
        elif cmd.type == "text":
            scale = cmd.font_size / 30
            (tw, th), _ = cv2.getTextSize(cmd.text, cv2.FONT_HERSHEY_SIMPLEX, scale, 2)
            origin = (int(cmd.x - tw / 2), int(cmd.y + th / 2))
            cv2.putText(image, cmd.text, origin, cv2.FONT_HERSHEY_SIMPLEX, scale,
                        fill or (255, 255, 255), 2, cv2.LINE_AA)


def _setup_logging(level: str):
    logging.basicConfig(
        level=level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def _load_config(path: Optional[str], duration: Optional[int]) -> ArcadeConfig:
    config = ArcadeConfig.from_yaml(path) if path else ArcadeConfig()
    if duration is not None:
        config.session = SessionSettings(game_duration_ms=duration * 1000)
    return config


def _check_game(game: str):
    if game not in GAME_TYPES:
        typer.echo(f"❌ Unknown game: {game}. Choose from: {', '.join(GAME_TYPES)}", err=True)
        raise typer.Exit(1)


@app.command()
def games():
    """List the available games."""
    for name in GAME_TYPES:
        typer.echo(name)


@app.command()
def play(
    game: str = typer.Argument(..., help="Game type, e.g. SimonSays"),
    config_path: Optional[str] = typer.Option(None, "--config", help="Path to YAML config"),
    camera: int = typer.Option(0, help="Camera device index"),
    duration: Optional[int] = typer.Option(None, help="Session length in seconds"),
    report_url: Optional[str] = typer.Option(None, help="Score service base URL"),
    token: Optional[str] = typer.Option(None, envvar="HAND_ARCADE_TOKEN", help="Score service bearer token"),
    log_level: str = typer.Option("info", help="Log level"),
):
    """Play a game in an OpenCV window. Press q to quit."""
    import cv2
    from hand_arcade.detector import HandDetector, camera_frames, now_ms
    from hand_arcade.driver import DetectorUnavailable, FrameDriver
    from hand_arcade.scores import ScoreClient
    from hand_arcade.session import GameSession

    _setup_logging(log_level)
    _check_game(game)
    config = _load_config(config_path, duration)

    client = None
    if report_url:
        if not token:
            raise typer.BadParameter("--token is required with --report-url")
        client = ScoreClient(report_url, token)

    session = GameSession(
        create_game(game, config),
        settings=config.session,
        reporter=client.save_score if client else None,
    )
    detector = HandDetector()
    driver = FrameDriver(detector, session)

    def show(image, result):
        bgr = cv2.cvtColor(image, cv2.COLOR_RGB2BGR)
        draw_commands(bgr, result.commands)
        cv2.imshow("HandArcade", bgr)
        if cv2.waitKey(1) & 0xFF == ord("q"):
            driver.stop()

    async def drive():
        try:
            return await driver.run(camera_frames(camera), render=show)
        finally:
            await driver.wait_idle()

    typer.echo(f"🎮 {game} (press q to quit)")
    session.start(now_ms())
    try:
        status = asyncio.run(drive())
    except DetectorUnavailable as e:
        typer.echo(f"❌ {e}", err=True)
        raise typer.Exit(1)
    except RuntimeError as e:
        typer.echo(f"❌ {e}", err=True)
        raise typer.Exit(1)
    except KeyboardInterrupt:
        driver.stop()
        status = session.status()
    finally:
        detector.close()
        cv2.destroyAllWindows()
        if client:
            client.close()

    if status["game_over"]:
        typer.echo(f"\n🏁 Final score: {status['score']}")
    else:
        typer.echo(f"\n👋 Left {game} with {status['score']} pts")


@app.command()
def serve(
    host: str = typer.Option("0.0.0.0", help="Bind address"),
    port: int = typer.Option(8765, help="Port"),
    config_path: Optional[str] = typer.Option(None, "--config", help="Path to YAML config"),
    camera: int = typer.Option(0, help="Camera device index"),
    report_url: Optional[str] = typer.Option(None, help="Score service base URL"),
    token: Optional[str] = typer.Option(None, envvar="HAND_ARCADE_TOKEN", help="Score service bearer token"),
    log_level: str = typer.Option("info", help="Log level"),
):
    """Start the WebSocket render server."""
    import uvicorn
    from hand_arcade.scores import ScoreClient
    from hand_arcade.server import app as fastapi_app, configure

    _setup_logging(log_level)
    reporter = None
    if report_url:
        if not token:
            raise typer.BadParameter("--token is required with --report-url")
        reporter = ScoreClient(report_url, token).save_score

    configure(_load_config(config_path, None), reporter=reporter, camera=camera)

    typer.echo(f"🚀 Starting HandArcade server on {host}:{port}")
    uvicorn.run(fastapi_app, host=host, port=port, log_level=log_level)


@app.command()
def simulate(
    game: str = typer.Argument(..., help="Game type, e.g. ShapeTracing"),
    duration: int = typer.Option(20, help="Simulated seconds"),
    fps: float = typer.Option(30.0, help="Simulated frame rate"),
    seed: Optional[int] = typer.Option(None, help="Random seed"),
    config_path: Optional[str] = typer.Option(None, "--config", help="Path to YAML config"),
    log_level: str = typer.Option("warning", help="Log level"),
):
    """Run a game over synthetic hand frames and print the score events."""
    import numpy as np
    from hand_arcade.session import GameSession
    from hand_arcade.synthetic import synthetic_frames

    _setup_logging(log_level)
    _check_game(game)
    config = _load_config(config_path, duration)
    rng = np.random.default_rng(seed)

    session = GameSession(create_game(game, config, rng=rng), settings=config.session)
    session.on_score(lambda e: typer.echo(f"   +{e.delta} at {e.timestamp_ms / 1000:.2f}s"))

    typer.echo(f"🤖 Simulating {game} for {duration}s at {fps:.0f} FPS")
    session.start(0)
    frames = 0
    # One extra second so the session clock runs out
    for frame in synthetic_frames((duration + 1) * 1000, fps=fps, rng=rng):
        session.tick(frame)
        frames += 1
        if not session.running:
            break

    typer.echo(f"\n📊 {frames} frames, final score: {session.score}")


def main():
    app()


if __name__ == "__main__":
    main()
