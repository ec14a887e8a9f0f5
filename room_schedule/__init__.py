# Package initializer for the room booking schedule viewer.

"""
The `room_schedule` package renders per-day room booking schedules from static
per-week JSON files.

Modules:

- ``config``: application settings loaded from environment variables.
- ``models``: Pydantic models for the week files and the API responses.
- ``weeks``: ISO week numbering and partition bounds.
- ``timeline``: lays bookings out as blocks on a fixed hour window.
- ``store``: queries over the currently loaded week.
- ``navigation``: the selected-date and building-filter state machine.
- ``render``: turns navigation state into a ``DayView``.
- ``sources``: reads week files from a directory or an HTTP server.
- ``main``: the FastAPI application definition.

"""
