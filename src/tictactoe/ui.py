"""FastAPI-powered web UI for playing tic-tac-toe in the browser."""

from __future__ import annotations

import logging
import threading
import time
import uuid
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, Tuple

from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import HTMLResponse
from pydantic import BaseModel

from .ads import AdProvider, InterstitialAdManager, NullAdManager, build_ad_manager
from .animation import WinningLineStyle
from .config import Settings
from .events import BoardReset, GameController, GameDrawn, LineCompleted, MarkPlaced
from .game import InvalidMove
from .layout import GridLayout, Rect
from .sounds import GAME_DRAW, GAME_RESET, GAME_WIN, TURN_PLAY, SoundBoard, SoundEffect

logger = logging.getLogger(__name__)

SCENE = Rect(0.0, 0.0, 360.0, 360.0)


@dataclass
class GameSession:
    """Container for one browser game: controller, ads and render effects."""

    controller: GameController
    ads: InterstitialAdManager | NullAdManager
    sounds: SoundBoard = field(default_factory=SoundBoard)
    move_log: List[Dict[str, int | str]] = field(default_factory=list)
    effects: List[Dict[str, object]] = field(default_factory=list)
    lock: threading.Lock = field(default_factory=threading.Lock, repr=False)
    last_seen: float = field(default_factory=time.time)
    _seq: int = field(default=0, init=False, repr=False)

    def __post_init__(self) -> None:
        bus = self.controller.bus
        bus.subscribe(MarkPlaced, self._on_mark)
        bus.subscribe(LineCompleted, self._on_line)
        bus.subscribe(GameDrawn, self._on_draw)
        bus.subscribe(BoardReset, self._on_reset)
        self.ads.attach(bus)

    def _on_mark(self, event: MarkPlaced) -> None:
        self.move_log.append({"player": event.mark, "row": event.row, "col": event.col})
        self._emit({"type": "mark", "row": event.row, "col": event.col, "mark": event.mark})
        self._sound(TURN_PLAY)

    def _on_line(self, event: LineCompleted) -> None:
        self._emit(
            {"type": "line", "player": event.player, "line": [list(p) for p in event.line]}
        )
        self._sound(GAME_WIN)

    def _on_draw(self, event: GameDrawn) -> None:
        self._sound(GAME_DRAW)

    def _on_reset(self, event: BoardReset) -> None:
        self.move_log.clear()
        self.effects.clear()
        self._emit({"type": "clear"})
        self._sound(GAME_RESET)

    def _sound(self, effect: SoundEffect) -> None:
        cue = self.sounds.cue(effect)
        if cue is not None:
            self._emit(cue)

    def _emit(self, effect: Dict[str, object]) -> None:
        # seq only grows, so the page can tell new effects from replayed ones
        self._seq += 1
        self.effects.append(dict(effect, seq=self._seq))


class SessionStore:
    """In-memory registry of live sessions, owned by one app instance."""

    def __init__(
        self,
        settings: Settings,
        ad_provider: Optional[AdProvider] = None,
        clock: Callable[[], float] = time.time,
    ):
        self.settings = settings
        self.ad_provider = ad_provider
        self.clock = clock
        self._sessions: Dict[str, GameSession] = {}
        self._lock = threading.Lock()

    def _cleanup(self) -> None:
        """Drop sessions idle for longer than the configured TTL."""

        now = self.clock()
        expired = [
            game_id
            for game_id, session in list(self._sessions.items())
            if now - session.last_seen >= self.settings.session_ttl_seconds
        ]
        for game_id in expired:
            self._sessions.pop(game_id, None)
        if expired:
            logger.info("Evicted %d idle game(s)", len(expired))

    def create(self) -> Tuple[str, GameSession]:
        ads = build_ad_manager(self.settings, self.ad_provider)
        session = GameSession(
            controller=GameController(),
            ads=ads,
            sounds=SoundBoard(enabled=self.settings.sound_enabled),
            last_seen=self.clock(),
        )
        ads.start()
        session_id = uuid.uuid4().hex
        with self._lock:
            self._cleanup()
            self._sessions[session_id] = session
        return session_id, session

    def get(self, game_id: str) -> GameSession:
        with self._lock:
            self._cleanup()
            try:
                session = self._sessions[game_id]
            except KeyError as exc:
                raise HTTPException(status_code=404, detail="Game not found") from exc
            session.last_seen = self.clock()
            return session

    def __len__(self) -> int:
        return len(self._sessions)


class MoveRequest(BaseModel):
    """Request payload for marking a cell; bounds are checked by the board."""

    row: int
    col: int


class TapRequest(BaseModel):
    """A tap/click in scene coordinates (origin bottom-left, y up)."""

    x: float
    y: float


def _status_text(session: GameSession) -> str:
    status = session.controller.status()
    if status.winner:
        return f"Winner: {status.winner} - tap to reset"
    if status.is_over:
        return "Draw - tap to reset"
    return f"Turn: {session.controller.board.current_player}"


def _serialize_session(
    game_id: str, session: GameSession, layout: GridLayout, style: WinningLineStyle
) -> Dict[str, object]:
    board = session.controller.board
    status = board.status()
    animation = None
    endpoints = layout.line_endpoints(status)
    if endpoints is not None:
        animation = style.plan(*endpoints)

    presenting = session.ads.presenting
    return {
        "id": game_id,
        "cells": [[c if c in ("X", "O") else "" for c in row] for row in board.rows()],
        "currentPlayer": board.current_player,
        "status": status.state,
        "winner": status.winner,
        "winningLine": [list(p) for p in status.line] if status.line else None,
        "statusText": _status_text(session),
        "moveLog": list(session.move_log),
        "effects": list(session.effects),
        "grid": {
            "scene": [SCENE.width, SCENE.height],
            "origin": list(layout.grid_origin),
            "cellSize": layout.cell_size,
        },
        "winningLineAnimation": animation,
        "interstitial": presenting.to_dict() if presenting else None,
        "soundEnabled": session.sounds.enabled,
    }


def create_app(
    settings: Optional[Settings] = None,
    ad_provider: Optional[AdProvider] = None,
    clock: Callable[[], float] = time.time,
) -> FastAPI:
    """Assemble the web app and everything it owns."""

    settings = settings or Settings.from_env()
    app = FastAPI(title="Tic-Tac-Toe", description="Tic-tac-toe played in the browser")
    app.state.settings = settings
    app.state.sessions = SessionStore(settings, ad_provider, clock)
    app.state.layout = GridLayout(SCENE)
    app.state.line_style = WinningLineStyle()

    def store(request: Request) -> SessionStore:
        return request.app.state.sessions

    def render(request: Request, game_id: str, session: GameSession) -> Dict[str, object]:
        with session.lock:
            return _serialize_session(
                game_id, session, request.app.state.layout, request.app.state.line_style
            )

    @app.post("/api/game")
    def create_game(request: Request) -> Dict[str, object]:
        game_id, session = store(request).create()
        logger.info("Created game %s", game_id)
        return render(request, game_id, session)

    @app.get("/api/game/{game_id}")
    def get_game(game_id: str, request: Request) -> Dict[str, object]:
        session = store(request).get(game_id)
        return render(request, game_id, session)

    @app.post("/api/game/{game_id}/move")
    def make_move(game_id: str, move: MoveRequest, request: Request) -> Dict[str, object]:
        session = store(request).get(game_id)
        with session.lock:
            try:
                session.controller.play(move.row, move.col)
            except InvalidMove as exc:
                raise HTTPException(status_code=400, detail=str(exc)) from exc
        return render(request, game_id, session)

    @app.post("/api/game/{game_id}/tap")
    def tap(game_id: str, body: TapRequest, request: Request) -> Dict[str, object]:
        session = store(request).get(game_id)
        layout: GridLayout = request.app.state.layout
        with session.lock:
            controller = session.controller
            if controller.status().is_over:
                controller.reset()
            else:
                cell = layout.cell_at((body.x, body.y))
                if cell is not None and cell in controller.board.empty_cells():
                    controller.play(*cell)
        return render(request, game_id, session)

    @app.post("/api/game/{game_id}/reset")
    def reset_game(game_id: str, request: Request) -> Dict[str, object]:
        session = store(request).get(game_id)
        with session.lock:
            session.controller.reset()
        return render(request, game_id, session)

    @app.post("/api/game/{game_id}/ad/dismissed")
    def dismiss_ad(game_id: str, request: Request) -> Dict[str, object]:
        session = store(request).get(game_id)
        with session.lock:
            if session.ads.presenting is None:
                raise HTTPException(status_code=400, detail="No ad is being shown")
            session.ads.dismissed()
        return render(request, game_id, session)

    @app.get("/", response_class=HTMLResponse)
    def index() -> str:
        return HTML_PAGE

    return app


HTML_PAGE = """<!DOCTYPE html>
<html lang=\"en\">
  <head>
    <meta charset=\"utf-8\" />
    <meta name=\"viewport\" content=\"width=device-width, initial-scale=1\" />
    <title>Tic-Tac-Toe</title>
    <style>
      :root {
        color-scheme: light dark;
        font-family: system-ui, -apple-system, BlinkMacSystemFont, \"Segoe UI\", sans-serif;
      }
      body {
        margin: 0;
        min-height: 100vh;
        display: flex;
        flex-direction: column;
        align-items: center;
        justify-content: center;
        background: #10131c;
        color: #f4f6ff;
      }
      #status {
        font-size: 1.5rem;
        margin-bottom: 1rem;
      }
      svg {
        width: min(90vw, 480px);
        height: min(90vw, 480px);
        cursor: pointer;
      }
      #grid {
        transition: opacity 0.3s ease;
      }
      .mark {
        font-size: 60px;
        text-anchor: middle;
        dominant-baseline: central;
        fill: #f4f6ff;
        animation: pop 0.15s ease-out;
      }
      @keyframes pop {
        from { transform: scale(0.2); opacity: 0; }
        to { transform: scale(1); opacity: 1; }
      }
      #overlay {
        position: fixed;
        inset: 0;
        display: none;
        align-items: center;
        justify-content: center;
        flex-direction: column;
        gap: 1rem;
        background: rgba(5, 8, 16, 0.95);
      }
      #overlay.visible {
        display: flex;
      }
      #overlay button {
        font-size: 1rem;
        padding: 0.55rem 1.2rem;
        border-radius: 999px;
        border: none;
      }
    </style>
  </head>
  <body>
    <div id=\"status\">Loading...</div>
    <svg id=\"scene\" viewBox=\"0 0 360 360\">
      <g id=\"grid\"></g>
      <g id=\"marks\"></g>
      <g id=\"line\"></g>
    </svg>
    <div id=\"overlay\">
      <a id=\"ad-link\" target=\"_blank\" rel=\"noopener\"></a>
      <button id=\"ad-close\">Close</button>
    </div>
    <script>
      const SVG_NS = 'http://www.w3.org/2000/svg';
      let gameId = null;
      let state = null;
      let lineShownFor = null;
      let lastEffectSeq = 0;
      let audio = null;

      function el(name, attrs) {
        const node = document.createElementNS(SVG_NS, name);
        for (const [key, value] of Object.entries(attrs)) {
          node.setAttribute(key, value);
        }
        return node;
      }

      // Scene coordinates grow upward; SVG grows downward.
      function flipY(y) {
        return state.grid.scene[1] - y;
      }

      function renderGrid() {
        const grid = document.getElementById('grid');
        grid.replaceChildren();
        const [ox, oy] = state.grid.origin;
        const size = state.grid.cellSize;
        const top = flipY(oy + size * 3);
        for (let i = 1; i < 3; i += 1) {
          grid.appendChild(el('line', {
            x1: ox + size * i, y1: top, x2: ox + size * i, y2: top + size * 3,
            stroke: '#7d87a8', 'stroke-width': 2,
          }));
          grid.appendChild(el('line', {
            x1: ox, y1: top + size * i, x2: ox + size * 3, y2: top + size * i,
            stroke: '#7d87a8', 'stroke-width': 2,
          }));
        }
      }

      function renderMarks() {
        const marks = document.getElementById('marks');
        marks.replaceChildren();
        const [ox, oy] = state.grid.origin;
        const size = state.grid.cellSize;
        state.cells.forEach((row, r) => {
          row.forEach((mark, c) => {
            if (!mark) return;
            const text = el('text', {
              class: 'mark',
              x: ox + size * c + size / 2,
              y: flipY(oy + size * (2 - r) + size / 2),
            });
            text.style.transformOrigin = `${text.getAttribute('x')}px ${text.getAttribute('y')}px`;
            text.textContent = mark;
            marks.appendChild(text);
          });
        });
      }

      function renderLine() {
        const group = document.getElementById('line');
        const grid = document.getElementById('grid');
        const plan = state.winningLineAnimation;
        if (!plan) {
          group.replaceChildren();
          grid.style.opacity = 1;
          lineShownFor = null;
          return;
        }
        const key = JSON.stringify(state.winningLine);
        if (lineShownFor === key) return;
        lineShownFor = key;
        group.replaceChildren();
        grid.style.transitionDuration = `${plan.gridFade.duration}s`;
        grid.style.opacity = plan.gridFade.alpha;
        const [x1, y1] = plan.start;
        const [x2, y2] = plan.end;
        for (const layer of plan.layers) {
          const stroke = el('line', {
            x1, y1: flipY(y1), x2, y2: flipY(y2),
            stroke: layer.color, 'stroke-width': layer.width, 'stroke-linecap': 'round',
          });
          stroke.style.filter = `drop-shadow(0 0 ${layer.glow / 2}px ${layer.color})`;
          stroke.animate(
            layer.keyframes.map((frame) => ({ offset: frame.offset, opacity: frame.opacity })),
            { duration: plan.drawDuration * 1000, delay: layer.delay * 1000,
              easing: 'linear', fill: 'both' },
          );
          group.appendChild(stroke);
        }
        group.style.transformOrigin = `${(x1 + x2) / 2}px ${flipY((y1 + y2) / 2)}px`;
        group.animate(
          plan.pulse.keyframes.map((frame) => ({
            offset: frame.offset, transform: `scale(${frame.scale})`,
          })),
          { duration: plan.pulse.duration * 2000, delay: plan.pulse.start * 1000,
            iterations: Infinity, easing: 'linear' },
        );
      }

      function renderAd() {
        const overlay = document.getElementById('overlay');
        const ad = state.interstitial;
        if (!ad) {
          overlay.classList.remove('visible');
          return;
        }
        const link = document.getElementById('ad-link');
        link.textContent = ad.headline;
        link.href = ad.url;
        overlay.classList.add('visible');
      }

      function playSound(effect) {
        audio = audio || new AudioContext();
        let at = audio.currentTime;
        for (const [frequency, duration] of effect.tones) {
          const osc = audio.createOscillator();
          const gain = audio.createGain();
          osc.frequency.value = frequency;
          gain.gain.setValueAtTime(effect.volume, at);
          gain.gain.exponentialRampToValueAtTime(0.001, at + duration);
          osc.connect(gain).connect(audio.destination);
          osc.start(at);
          osc.stop(at + duration);
          at += duration;
        }
      }

      function playNewSounds() {
        const fresh = state.effects.filter((effect) => effect.seq > lastEffectSeq);
        if (state.effects.length) {
          lastEffectSeq = Math.max(...state.effects.map((effect) => effect.seq));
        }
        if (!state.soundEnabled) return;
        for (const effect of fresh) {
          if (effect.type === 'sound') playSound(effect);
        }
      }

      function setState(data) {
        state = data;
        document.getElementById('status').textContent = state.statusText;
        renderGrid();
        renderMarks();
        renderLine();
        renderAd();
        playNewSounds();
      }

      async function post(path, body) {
        const response = await fetch(path, {
          method: 'POST',
          headers: { 'Content-Type': 'application/json' },
          body: body ? JSON.stringify(body) : undefined,
        });
        if (!response.ok) {
          const detail = await response.json().catch(() => ({}));
          throw new Error(detail.detail || response.statusText);
        }
        return response.json();
      }

      async function startGame() {
        setState(await post('/api/game'));
        gameId = state.id;
      }

      document.getElementById('scene').addEventListener('click', async (event) => {
        if (!gameId) return;
        const svg = event.currentTarget;
        const point = svg.createSVGPoint();
        point.x = event.clientX;
        point.y = event.clientY;
        const local = point.matrixTransform(svg.getScreenCTM().inverse());
        try {
          setState(await post(`/api/game/${gameId}/tap`, { x: local.x, y: flipY(local.y) }));
        } catch (error) {
          console.error(error);
        }
      });

      document.getElementById('ad-close').addEventListener('click', async () => {
        try {
          setState(await post(`/api/game/${gameId}/ad/dismissed`));
        } catch (error) {
          console.error(error);
          document.getElementById('overlay').classList.remove('visible');
        }
      });

      startGame();
    </script>
  </body>
</html>
"""
