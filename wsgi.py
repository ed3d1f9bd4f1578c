"""
WSGI entry point for Starship Saboteur.
Gunicorn loads `wsgi:app`; running the module directly starts the Socket.IO server.
"""

from app import app, app_config, socketio

application = app

if __name__ == "__main__":
    socketio.run(app, host=app_config.host, port=app_config.port, debug=app_config.debug)
