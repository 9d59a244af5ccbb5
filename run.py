# run.py
import os
import threading
import time
import webbrowser

from crane_crm import create_app

HOST = os.environ.get("CRANE_HOST", "127.0.0.1")
PORT = int(os.environ.get("CRANE_PORT", "5000"))

app = create_app()


def open_dashboard():
    # サーバ起動を待ってからダッシュボードを開く
    time.sleep(0.8)
    webbrowser.open(f"http://{HOST}:{PORT}/")


if __name__ == "__main__":
    if os.environ.get("CRANE_NO_BROWSER", "0") != "1":
        threading.Thread(target=open_dashboard, daemon=True).start()
    app.run(host=HOST, port=PORT, debug=os.environ.get("FLASK_DEBUG", "0") == "1", use_reloader=False)
