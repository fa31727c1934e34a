"""Allows `python -m parcel_server` to start the API server."""

from parcel_server.main import run

if __name__ == "__main__":
    run()
