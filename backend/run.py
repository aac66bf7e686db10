from tally import create_app, socketio

app = create_app()

if __name__ == '__main__':
    sweeper = app.extensions['sweeper']
    sweeper.start()
    try:
        # Use SocketIO server to enable websockets in dev
        socketio.run(app, host=app.config['HOST'], port=app.config['PORT'],
                     allow_unsafe_werkzeug=True)
    finally:
        sweeper.stop()
        app.extensions['broadcaster'].shutdown()
