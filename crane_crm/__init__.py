import os
import sys
import logging
from flask import Flask
from flask_sqlalchemy import SQLAlchemy
from .config import Config

db = SQLAlchemy()


def resource_path(relative_path: str) -> str:
    """
    リソース（templates/static）用ベースパス
    - EXE: sys._MEIPASS 配下の templates, static
    - 開発: crane_crm ディレクトリ配下の templates, static
    """
    if getattr(sys, "frozen", False):
        base = getattr(sys, "_MEIPASS", os.path.dirname(sys.executable))
    else:
        base = os.path.dirname(os.path.abspath(__file__))
    return os.path.join(base, relative_path)


def create_app(test_config=None) -> Flask:
    """Flask アプリ本体を生成するファクトリ"""
    from flask import g, session, render_template
    from crane_crm.models.user import User

    def load_current_user():
        user_id = session.get("user_id")
        if not user_id:
            g.current_user = None
            return

        user = db.session.get(User, user_id)
        if not user or not getattr(user, "is_active", True):
            session.clear()
            g.current_user = None
        else:
            g.current_user = user

    def inject_current_user():
        return {"current_user": g.get("current_user")}

    def seed_admin_user():
        login_id = app.config["ADMIN_LOGIN_ID"]
        if User.query.filter_by(login_id=login_id).first():
            return
        admin = User(login_id=login_id, display_name="Administrator", role="admin", is_active=True)
        admin.set_password(app.config["ADMIN_PASSWORD"])
        db.session.add(admin)
        db.session.commit()
        logging.info("[BOOT] seeded admin user login_id=%s", login_id)

    # logging
    debug_mode = os.environ.get("FLASK_DEBUG", "0") == "1"
    logging.basicConfig(
        level=logging.DEBUG if debug_mode else logging.INFO,
        format='[%(asctime)s] %(levelname)s in %(module)s: %(message)s',
    )

    app = Flask(
        __name__,
        template_folder=resource_path("templates"),
        static_folder=resource_path("static"),
    )
    app.logger.setLevel(logging.INFO)

    app.config.from_object(Config)
    if test_config:
        app.config.update(test_config)
    app.config["TEMPLATES_AUTO_RELOAD"] = debug_mode
    app.logger.info("[DB] Using database: %s", app.config["SQLALCHEMY_DATABASE_URI"])

    @app.errorhandler(403)
    def forbidden(e):
        return render_template("error.html", code=403, message="You don't have permission to access this page."), 403

    @app.errorhandler(404)
    def not_found(e):
        return render_template("error.html", code=404, message="Page not found."), 404

    @app.errorhandler(500)
    def internal_error(e):
        return render_template("error.html", code=500, message="Something went wrong."), 500

    app.before_request(load_current_user)
    app.context_processor(inject_current_user)

    from crane_crm.formatters import format_currency, format_date, title_label
    app.jinja_env.filters["currency"] = format_currency
    app.jinja_env.filters["date"] = format_date
    app.jinja_env.filters["label"] = title_label

    db.init_app(app)

    with app.app_context():
        # モデルを読み込んでからテーブル作成
        from crane_crm import models  # noqa: F401
        db.create_all()
        seed_admin_user()

    # Blueprints
    from crane_crm.routes.auth import auth_bp
    from crane_crm.routes.main import main_bp
    from crane_crm.routes.customer import customer_bp
    from crane_crm.routes.lead import lead_bp
    from crane_crm.routes.deal import deal_bp
    from crane_crm.routes.equipment import equipment_bp
    from crane_crm.routes.quotation import quotation_bp
    from crane_crm.routes.template import template_bp
    from crane_crm.routes.config import config_bp

    app.register_blueprint(auth_bp)
    app.register_blueprint(main_bp)
    app.register_blueprint(customer_bp)
    app.register_blueprint(lead_bp)
    app.register_blueprint(deal_bp)
    app.register_blueprint(equipment_bp)
    app.register_blueprint(quotation_bp)
    app.register_blueprint(template_bp)
    app.register_blueprint(config_bp)

    def log_routes():
        logging.debug("[Flask routes] URL map:")
        for rule in app.url_map.iter_rules():
            logging.debug("%s %s -> %s", ",".join(sorted(rule.methods)), rule.rule, rule.endpoint)

    log_routes()

    # ヘルスチェック（認証・DB依存なし）
    @app.route("/health")
    def health():
        return "OK", 200

    app.logger.info("[BOOT] create_app completed")
    return app
