from numguess import create_app, socketio
from numguess.services.games.scheduler import start_stats_reconciler

app = create_app()
start_stats_reconciler(app)

if __name__ == '__main__':
    # Use SocketIO server to enable websockets in dev
    socketio.run(app, debug=True)
