"""
Private Booking - main entry point.

Runs the API with uvicorn:

    private-booking
    python -m private_booking.main
"""

import uvicorn

from private_booking.config import get_settings


def run():
    """Run the application using uvicorn."""
    settings = get_settings()

    uvicorn.run(
        "private_booking.api.app:create_app",
        factory=True,
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.debug,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    run()
