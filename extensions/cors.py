from flask_cors import CORS 

# restrict API access to the configured origins; "*" keeps the web app and bot webview open
def init_cors(app):
    origins = app.config.get("CORS_ORIGINS") or ["*"]
    if origins == ["*"]:
        CORS(app)
    else:
        CORS(app, origins=origins, supports_credentials=True)
