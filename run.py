from fleet import create_app

app = create_app()

if __name__ == "__main__":
    # threaded: each SSE stream holds a worker
    app.run(threaded=True)
