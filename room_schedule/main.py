"""Main application entry point for the room booking schedule viewer.

This module defines the FastAPI application, configures logging, owns the
navigation state and serves both a JSON API and a minimal HTML user
interface. The browser only paints the ``DayView`` returned by the API;
date stepping, week loading and building filters all happen here.

Endpoints:
  - ``/api/view``: the current day view.
  - ``/api/navigate/step``, ``/api/navigate/jump``, ``/api/navigate/today``:
    change the selected date and return the new view.
  - ``/api/filter/{index}/toggle``, ``/api/filter/clear``: building filter.
  - ``/healthz``: simple health check endpoint.
  - ``/``: serve the schedule page.

Request handlers run in a thread pool, so the state is guarded by a lock.
Week files are fetched outside the lock and applied through the
controller's tickets, which drops responses that arrive after the user has
already moved on.
"""

from __future__ import annotations

import logging
import threading
from datetime import date, datetime, timezone
from typing import Any, Dict, Optional

import uvicorn
from fastapi import Depends, FastAPI, HTTPException, Query
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import HTMLResponse

from .config import settings
from .models import DayView
from .navigation import NavigationController
from .render import render
from .sources import source_from_settings
from .weeks import DayLike

logger = logging.getLogger("room_schedule")
logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)

app = FastAPI(title="Room Booking Schedule")

# CORS is off by default because the page and the API share an origin.
if settings.enable_cors:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["GET", "POST"],
        allow_headers=["*"],
    )

_state_lock = threading.Lock()
_controller: Optional[NavigationController] = None


def _utcnow() -> datetime:
    """Return the current time in UTC."""
    return datetime.now(timezone.utc)


def _navigate(controller: NavigationController, target: DayLike) -> None:
    """Select ``target``, fetching its week without holding the lock."""
    with _state_lock:
        ticket = controller.navigate_to(target)
    if ticket is None:
        return
    try:
        partition = controller.fetch(ticket)
    except Exception:
        logger.exception("Unexpected error loading bookings for %s", ticket.date)
        partition = None
    with _state_lock:
        controller.complete_fetch(ticket, partition)


def get_controller() -> NavigationController:
    """Return the shared controller, loading today's week on first use."""
    global _controller
    with _state_lock:
        created = _controller is None
        if created:
            _controller = NavigationController(source_from_settings(settings))
        controller = _controller
    if created:
        _navigate(controller, controller.state.selected_date)
    return controller


def _view(controller: NavigationController) -> DayView:
    with _state_lock:
        return render(controller.state, settings)


@app.get("/api/view", response_model=DayView)
def api_view(controller: NavigationController = Depends(get_controller)) -> DayView:
    """Return the view for the selected date."""
    return _view(controller)


@app.post("/api/navigate/step", response_model=DayView)
def api_step(
    days: int = Query(default=1, ge=-366, le=366),
    controller: NavigationController = Depends(get_controller),
) -> DayView:
    """Move the selected date by ``days``."""
    with _state_lock:
        target = controller.state.selected_date.toordinal() + days
    _navigate(controller, date.fromordinal(target))
    return _view(controller)


@app.post("/api/navigate/jump", response_model=DayView)
def api_jump(
    day: date = Query(..., alias="date"),
    controller: NavigationController = Depends(get_controller),
) -> DayView:
    """Select an arbitrary date."""
    _navigate(controller, day)
    return _view(controller)


@app.post("/api/navigate/today", response_model=DayView)
def api_today(controller: NavigationController = Depends(get_controller)) -> DayView:
    """Select today's date."""
    _navigate(controller, controller.today())
    return _view(controller)


@app.post("/api/filter/{index}/toggle", response_model=DayView)
def api_toggle_filter(index: int, controller: NavigationController = Depends(get_controller)) -> DayView:
    """Add or remove one building from the filter."""
    try:
        with _state_lock:
            controller.toggle_building_filter(index)
    except IndexError as exc:
        raise HTTPException(status_code=404, detail=str(exc))
    return _view(controller)


@app.post("/api/filter/clear", response_model=DayView)
def api_clear_filter(controller: NavigationController = Depends(get_controller)) -> DayView:
    """Empty the filter; it stays empty until another week loads."""
    with _state_lock:
        controller.clear_filter()
    return _view(controller)


@app.get("/healthz")
def healthz() -> Dict[str, Any]:
    """Health check endpoint for monitoring."""
    return {"ok": True, "time": _utcnow().isoformat().replace("+00:00", "Z")}


BASE_PALETTE = ("#4e79a7", "#f28e2b", "#e15759", "#76b7b2", "#59a14f", "#edc948", "#b07aa1", "#ff9da7")


def palette_css(size: int) -> str:
    """CSS variables ``--c0`` .. ``--c{size-1}``; colours past the base set are spread over the hue wheel."""
    colours = []
    for i in range(size):
        if i < len(BASE_PALETTE):
            colours.append(BASE_PALETTE[i])
        else:
            colours.append(f"hsl({round(i * 360 / size)}, 55%, 55%)")
    return " ".join(f"--c{i}: {colour};" for i, colour in enumerate(colours))


@app.get("/", response_class=HTMLResponse)
def schedule_page() -> HTMLResponse:
    """Serve the single page schedule viewer.

    The UI is embedded here rather than in a template or static file so the
    service ships as one package without a frontend build chain.
    """
    css_vars = """
    :root {
      --bg: #f6f7fb;
      --fg: #1b2030;
      --muted: #6b7285;
      --card: #ffffff;
      --border: rgba(0,0,0,0.10);
      {palette}
    }
    """.replace("{palette}", palette_css(settings.palette_size))
    html = """
<!doctype html>
<html lang="en">
<head>
  <meta charset="utf-8" />
  <meta name="viewport" content="width=device-width, initial-scale=1" />
  <title>Room bookings</title>
  <style>
    {css_vars}
    body { margin: 0; font-family: system-ui, -apple-system, Segoe UI, Roboto, Ubuntu, Arial; background: var(--bg); color: var(--fg); }
    header { display: flex; gap: 12px; align-items: center; padding: 16px 22px; border-bottom: 1px solid var(--border); flex-wrap: wrap; }
    h1 { margin: 0; font-size: 22px; }
    button, input { font-size: 14px; padding: 7px 11px; border-radius: 10px; border: 1px solid var(--border); background: var(--card); cursor: pointer; }
    .label { font-weight: 600; }
    .meta { color: var(--muted); font-size: 13px; margin-left: auto; }
    main { padding: 16px 22px 28px; }
    .overview { display: grid; grid-template-columns: repeat(auto-fit, minmax(200px, 1fr)); gap: 10px; }
    .box { background: var(--card); border: 1px solid var(--border); border-left: 6px solid var(--color); border-radius: 12px; padding: 10px 12px; cursor: pointer; opacity: 0.65; }
    .box.selected { opacity: 1; box-shadow: 0 4px 14px rgba(0,0,0,0.10); }
    .box .name { font-weight: 650; }
    .box .sum { color: var(--muted); font-size: 13px; margin-top: 4px; }
    .ticks, .row { position: relative; margin-left: 200px; }
    .ticks { height: 18px; margin-top: 22px; font-size: 11px; color: var(--muted); }
    .ticks span { position: absolute; transform: translateX(-50%); }
    .row { height: 30px; background: var(--card); border: 1px solid var(--border); border-radius: 8px; margin-bottom: 6px; }
    .row .room { position: absolute; left: -200px; width: 190px; top: 6px; font-size: 13px; overflow: hidden; white-space: nowrap; text-overflow: ellipsis; }
    .block { position: absolute; top: 3px; bottom: 3px; border-radius: 6px; background: var(--color); cursor: pointer; }
    .details { margin-top: 22px; }
    .booking { background: var(--card); border: 1px solid var(--border); border-radius: 10px; padding: 8px 10px; margin-bottom: 6px; font-size: 13px; }
    .empty { margin-top: 22px; color: var(--muted); }
    #popup { position: fixed; display: none; background: var(--card); border: 1px solid var(--border); border-radius: 10px; padding: 10px 12px; box-shadow: 0 8px 30px rgba(0,0,0,0.18); font-size: 13px; }
  </style>
</head>
<body>
  <header>
    <h1>Room bookings</h1>
    <button id="prev">&larr;</button>
    <span class="label" id="date-label">Loading...</span>
    <button id="next">&rarr;</button>
    <button id="today">Today</button>
    <input type="date" id="picker" />
    <button id="clear">Show all buildings</button>
    <span class="meta" id="meta"></span>
  </header>
  <main>
    <div class="overview" id="overview"></div>
    <div id="empty" class="empty"></div>
    <div class="ticks" id="ticks"></div>
    <div id="timelines"></div>
    <div class="details" id="details"></div>
  </main>
  <div id="popup"></div>
<script>
function el(tag, cls, text) {
  const e = document.createElement(tag);
  if (cls) e.className = cls;
  if (text !== undefined && text !== null) e.textContent = text;
  return e;
}
function colorVar(i) { return `var(--c${i})`; }
function pct(f) { return `${(f * 100).toFixed(3)}%`; }
function summaryText(s) {
  return s.freeAllDay ? "Free all day" : `${s.firstStart} - ${s.lastEnd}`;
}
function showPopup(ev, block, room) {
  const p = document.getElementById("popup");
  p.innerHTML = "";
  p.appendChild(el("div", "label", block.title || "Booked"));
  p.appendChild(el("div", null, `${room} · ${block.displayRange}`));
  if (block.renterName) p.appendChild(el("div", null, block.renterName));
  p.style.left = `${ev.clientX + 12}px`;
  p.style.top = `${ev.clientY + 12}px`;
  p.style.display = "block";
}
function paint(view) {
  document.getElementById("date-label").textContent = view.dateLabel;
  document.getElementById("picker").value = view.date;
  const meta = [view.weekLabel];
  if (view.lastUpdate) meta.push(`Updated ${view.lastUpdate}`);
  document.getElementById("meta").textContent = meta.join(" · ");
  document.getElementById("empty").textContent = view.message || "";

  const overview = document.getElementById("overview");
  overview.innerHTML = "";
  view.overviewBoxes.forEach(b => {
    const box = el("div", b.isSelected ? "box selected" : "box");
    box.style.setProperty("--color", colorVar(b.colorIndex));
    box.appendChild(el("div", "name", b.buildingName));
    box.appendChild(el("div", "sum", summaryText(b.summary)));
    box.onclick = () => call(`/api/filter/${b.buildingIndex}/toggle`);
    overview.appendChild(box);
  });

  const ticks = document.getElementById("ticks");
  ticks.innerHTML = "";
  if (view.timelines.length) {
    const span = view.windowEnd - view.windowStart;
    view.hourTicks.forEach(h => {
      const t = el("span", null, `${String(h).padStart(2, "0")}:00`);
      t.style.left = pct((h - view.windowStart) / span);
      ticks.appendChild(t);
    });
  }
  const timelines = document.getElementById("timelines");
  timelines.innerHTML = "";
  view.timelines.forEach(t => {
    const row = el("div", "row");
    row.style.setProperty("--color", colorVar(t.colorIndex));
    row.appendChild(el("div", "room", `${t.buildingName} - ${t.roomName}`));
    t.blocks.forEach(b => {
      const blk = el("div", "block");
      blk.style.left = pct(b.startFraction);
      blk.style.width = pct(b.endFraction - b.startFraction);
      blk.title = `${b.displayRange} ${b.title || ""}`;
      blk.onclick = (ev) => { ev.stopPropagation(); showPopup(ev, b, t.roomName); };
      row.appendChild(blk);
    });
    timelines.appendChild(row);
  });

  const details = document.getElementById("details");
  details.innerHTML = "";
  view.details.forEach(d => {
    const item = el("div", "booking");
    item.appendChild(el("div", "label", `${d.buildingName} - ${d.roomName}`));
    item.appendChild(el("div", null, d.displayRange));
    if (d.title) item.appendChild(el("div", null, d.title));
    if (d.renterName) item.appendChild(el("div", null, d.renterName));
    details.appendChild(item);
  });
  if (view.status === "loaded" && !view.details.length) {
    details.appendChild(el("div", "empty", "No bookings."));
  }
}
async function call(path, method = "POST") {
  try {
    const r = await fetch(path, {method, cache: "no-store"});
    if (!r.ok) return;
    paint(await r.json());
  } catch (e) {
    document.getElementById("empty").textContent = `Failed to load: ${e}`;
  }
}
document.getElementById("prev").onclick = () => call("/api/navigate/step?days=-1");
document.getElementById("next").onclick = () => call("/api/navigate/step?days=1");
document.getElementById("today").onclick = () => call("/api/navigate/today");
document.getElementById("clear").onclick = () => call("/api/filter/clear");
document.getElementById("picker").onchange = (ev) => {
  if (ev.target.value) call(`/api/navigate/jump?date=${ev.target.value}`);
};
document.addEventListener("click", () => { document.getElementById("popup").style.display = "none"; });
document.addEventListener("keydown", (ev) => {
  if (ev.target.tagName === "INPUT") return;
  if (ev.key === "ArrowLeft") call("/api/navigate/step?days=-1");
  if (ev.key === "ArrowRight") call("/api/navigate/step?days=1");
  if (ev.key === "Escape") document.getElementById("popup").style.display = "none";
});
call("/api/view", "GET");
</script>
</body>
</html>
"""  # noqa: E501
    return HTMLResponse(content=html.replace("{css_vars}", css_vars))


def main() -> None:
    """Run the viewer with uvicorn on ``HOST``/``PORT``."""
    uvicorn.run(app, host=settings.host, port=settings.port, log_level=settings.log_level.lower())


if __name__ == "__main__":
    main()
