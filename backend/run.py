import os

from inkthink import create_app, socketio

app = create_app()

if __name__ == '__main__':
    # SocketIO's runner picks eventlet/gevent when installed, threading otherwise
    socketio.run(
        app,
        host=os.environ.get('HOST', '127.0.0.1'),
        port=int(os.environ.get('PORT', '4000')),
        debug=bool(os.environ.get('FLASK_DEBUG')),
        allow_unsafe_werkzeug=True,
    )
