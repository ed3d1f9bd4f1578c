#!/usr/bin/env python3
"""
Development server runner.

Starts Gunicorn with the eventlet worker and auto-reload, which handles
Socket.IO far better than Flask's built-in server.
"""

import os
import subprocess
import sys


def build_command(reload=True):
    cmd = ['gunicorn', '--config', 'gunicorn.conf.py', '--log-level', 'info']
    if reload:
        cmd.append('--reload')
    cmd.append('wsgi:app')
    return cmd


def main():
    os.environ.setdefault('FLASK_ENV', 'development')
    os.environ.setdefault('PORT', '8000')

    from config_factory import ConfigError, load_config
    try:
        config = load_config()
    except ConfigError as e:
        print(f"Invalid configuration: {e}")
        sys.exit(1)

    print("Starting Starship Saboteur development server...")
    print(f"Server: http://{config.host}:{config.port}")
    print(f"Mission: {config.mission_duration_seconds}s, {config.total_distance} distance units, "
          f"{config.min_players_required}-{config.max_players_per_room} players")
    print("Press Ctrl+C to stop the server")

    try:
        subprocess.run(build_command(), check=True)
    except KeyboardInterrupt:
        print("\nShutting down development server...")
    except subprocess.CalledProcessError as e:
        print(f"Error starting server: {e}")
        sys.exit(1)


if __name__ == '__main__':
    main()
