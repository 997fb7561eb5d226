"""
Entrypoint: uvicorn livefeed.web.app:app

Builds the service from the environment (.env honoured). A classifier that
cannot load its model aborts startup here.
"""
from livefeed.services.api import create_app

app = create_app()
