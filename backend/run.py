import click

from cricket_relay import create_app, socketio

app = create_app()


@click.command()
@click.option('--host', default='0.0.0.0', show_default=True, help='Interface to bind.')
@click.option('--port', default=3000, show_default=True, type=int, help='Port to listen on.')
@click.option('--debug/--no-debug', default=False, help='Enable Flask debug mode.')
def serve(host, port, debug):
    """Run the pairing relay with websocket support."""
    app.logger.info(f"[serve] host={host} port={port} grace={app.config['GRACE_PERIOD_SEC']}s")
    socketio.run(app, host=host, port=port, debug=debug, allow_unsafe_werkzeug=True)


if __name__ == '__main__':
    serve()
