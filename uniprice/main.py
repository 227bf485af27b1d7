from flask import Blueprint, Flask, jsonify, request, session
from functools import wraps
import os
import uuid

# ═══════════════════════════════════════════════════════════════════════════
# CONTENEDOR DE DEPENDENCIAS - Servicios y Repositorios
# ═══════════════════════════════════════════════════════════════════════════
# Las rutas solo traducen HTTP ↔ servicios. La lógica de negocio vive en
# services/ y la persistencia en repositories/.
# ═══════════════════════════════════════════════════════════════════════════
from uniprice.app_container import AppContainer, get_container
from uniprice.config import Config
from uniprice.utils.logger import get_logger

logger = get_logger("http")

shop_bp = Blueprint("shop", __name__)
admin_bp = Blueprint("admin", __name__)


# ═══════════════════════════════════════════════════════════════════════════
# SESIÓN, CSRF Y PERMISOS
# ═══════════════════════════════════════════════════════════════════════════

def generate_csrf_token():
    if 'csrf_token' not in session:
        session['csrf_token'] = uuid.uuid4().hex
    return session['csrf_token']


def client_id():
    """Id anónimo del comprador (clave de sus favoritos)."""
    if 'client_id' not in session:
        session['client_id'] = uuid.uuid4().hex
    return session['client_id']


def verify_csrf(f):
    @wraps(f)
    def wrapper(*args, **kwargs):
        if request.method in ('POST', 'PUT', 'DELETE'):
            token = session.get('csrf_token')
            form_token = (
                request.form.get('csrf_token') or
                request.headers.get('X-CSRF-Token') or
                request.headers.get('X-CSRFToken')
            )
            if not form_token and request.is_json:
                form_token = json_body().get('csrf_token')

            if not token or not form_token or token != form_token:
                return {"ok": False, "error": "CSRF token inválido"}, 403
        return f(*args, **kwargs)
    return wrapper


def admin_required(f):
    @wraps(f)
    def wrapper(*args, **kwargs):
        if not session.get("admin"):
            return {"ok": False, "error": "Debes iniciar sesión como administrador."}, 401
        return f(*args, **kwargs)
    return wrapper


def json_body():
    """Cuerpo JSON como dict; cualquier otra forma (lista, escalar) cuenta como vacío."""
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else {}


def respond(result, error_status=400):
    """Traduce un dict de resultado de servicio a respuesta JSON."""
    if result.get('ok'):
        return jsonify(result)
    if result.get('not_found'):
        return jsonify(result), 404
    if result.get('auth_required'):
        return jsonify(result), 409
    return jsonify(result), error_status


def read_upload():
    """Archivo del campo 'file' como (bytes, nombre, mime) o None."""
    upload = request.files.get('file')
    if upload is None or not upload.filename:
        return None
    return upload.read(), upload.filename, upload.mimetype


# ═══════════════════════════════════════════════════════════════════════════
# TIENDA
# ═══════════════════════════════════════════════════════════════════════════

@shop_bp.route("/status", methods=["GET"])
def status():
    container = get_container()
    return jsonify({"ok": True, **container.mode_controller.status()})


@shop_bp.route("/csrf", methods=["GET"])
def csrf():
    client_id()
    return jsonify({"ok": True, "csrf_token": generate_csrf_token()})


@shop_bp.route("/mode/reset", methods=["POST"])
@verify_csrf
def mode_reset():
    """'Retry Cloud Sync': borra el modo persistido y reintenta Firestore."""
    container = get_container()
    container.mode_controller.reset()
    return jsonify({"ok": True, **container.mode_controller.status()})


@shop_bp.route("/products", methods=["GET"])
def products():
    container = get_container()
    result = container.catalog_service.list_products(
        request.args.get("category"), client_id()
    )
    return respond(result)


@shop_bp.route("/favorites/toggle", methods=["POST"])
@verify_csrf
def favorites_toggle():
    container = get_container()
    data = json_body()
    return respond(container.catalog_service.toggle_favorite(client_id(), data.get("productId")))


# -- Carrito -----------------------------------------------------------------

@shop_bp.route("/cart", methods=["GET"])
def cart():
    return jsonify({"ok": True, "cart": get_container().cart_service.get_cart()})


@shop_bp.route("/cart/add", methods=["POST"])
@verify_csrf
def cart_add():
    container = get_container()
    product = container.catalog_service.get_product(str(json_body().get("productId") or ""))
    if product is None:
        return jsonify({"ok": False, "error": "Producto no encontrado"}), 404
    return respond(container.cart_service.add_to_cart(product))


@shop_bp.route("/cart/increment", methods=["POST"])
@verify_csrf
def cart_increment():
    product_id = str(json_body().get("productId") or "")
    return respond(get_container().cart_service.increment(product_id))


@shop_bp.route("/cart/decrement", methods=["POST"])
@verify_csrf
def cart_decrement():
    product_id = str(json_body().get("productId") or "")
    return respond(get_container().cart_service.decrement(product_id))


@shop_bp.route("/cart/quantity", methods=["POST"])
@verify_csrf
def cart_quantity():
    data = json_body()
    return respond(get_container().cart_service.set_quantity(
        str(data.get("productId") or ""), data.get("quantity")
    ))


@shop_bp.route("/cart/clear", methods=["POST"])
@verify_csrf
def cart_clear():
    return respond(get_container().cart_service.clear())


# -- Bundle ------------------------------------------------------------------

@shop_bp.route("/bundle", methods=["GET"])
def bundle():
    return jsonify({"ok": True, "bundle": get_container().bundle_service.get_bundle().to_dict()})


@shop_bp.route("/bundle/add", methods=["POST"])
@verify_csrf
def bundle_add():
    container = get_container()
    product = container.catalog_service.get_product(str(json_body().get("productId") or ""))
    if product is None:
        return jsonify({"ok": False, "error": "Producto no encontrado"}), 404
    return respond(container.bundle_service.add(product))


@shop_bp.route("/bundle/remove", methods=["POST"])
@verify_csrf
def bundle_remove():
    """Por índice (slot) o, si no viene índice, por id de producto."""
    container = get_container()
    data = json_body()
    if data.get("index") is not None:
        return respond(container.bundle_service.remove_at(data.get("index")))
    return respond(container.bundle_service.remove_by_id(str(data.get("productId") or "")))


@shop_bp.route("/bundle/clear", methods=["POST"])
@verify_csrf
def bundle_clear():
    return respond(get_container().bundle_service.clear())


@shop_bp.route("/bundle/complete", methods=["POST"])
@verify_csrf
def bundle_complete():
    return respond(get_container().bundle_service.complete())


@shop_bp.route("/concierge", methods=["POST"])
@verify_csrf
def concierge():
    result = get_container().concierge_service.suggest(json_body().get("intent"))
    return respond(result, error_status=502)


# -- Checkout ----------------------------------------------------------------

@shop_bp.route("/checkout", methods=["POST"])
@verify_csrf
def checkout():
    container = get_container()
    result = container.checkout_service.place_order(json_body().get("customer"))
    if not result['ok'] and 'field' not in result and container.cart_service.lines():
        # Falla de persistencia, no de validación
        return jsonify(result), 503
    return respond(result)


@shop_bp.route("/checkout/cities", methods=["GET"])
def checkout_cities():
    service = get_container().checkout_service
    return jsonify({"ok": True, "cities": service.cities, "default": service.default_city})


# -- Notificaciones push -----------------------------------------------------

@shop_bp.route("/notifications/token", methods=["POST"])
@verify_csrf
def notifications_token():
    return respond(get_container().notification_service.register_token(json_body().get("token")))


@shop_bp.route("/notifications/foreground", methods=["POST"])
@verify_csrf
def notifications_foreground():
    return respond(get_container().notification_service.handle_foreground(json_body()))


# ═══════════════════════════════════════════════════════════════════════════
# ADMINISTRACIÓN
# ═══════════════════════════════════════════════════════════════════════════

@admin_bp.route("/login", methods=["POST"])
@verify_csrf
def admin_login():
    data = json_body()
    result = get_container().auth_service.authenticate(data.get("username"), data.get("password"))
    if not result['ok']:
        return jsonify(result), 401
    session["admin"] = result["username"]
    return jsonify(result)


@admin_bp.route("/logout", methods=["POST"])
@verify_csrf
def admin_logout():
    session.pop("admin", None)
    return jsonify({"ok": True})


# -- Productos ---------------------------------------------------------------

@admin_bp.route("/products", methods=["GET", "POST"])
@admin_required
@verify_csrf
def admin_products():
    service = get_container().inventory_service
    if request.method == "POST":
        result = service.create_product(json_body())
        if result['ok']:
            return jsonify(result), 201
        return respond(result, error_status=400 if 'field' in result else 503)
    return jsonify({"ok": True, "products": service.list_products()})


@admin_bp.route("/products/<product_id>", methods=["PUT", "DELETE"])
@admin_required
@verify_csrf
def admin_product(product_id):
    service = get_container().inventory_service
    if request.method == "DELETE":
        return respond(service.delete_product(product_id), error_status=503)
    result = service.update_product(product_id, json_body())
    return respond(result, error_status=400 if 'field' in result else 503)


@admin_bp.route("/products/import", methods=["POST"])
@admin_required
@verify_csrf
def admin_products_import():
    upload = read_upload()
    if upload is None:
        return jsonify({"ok": False, "error": "Archivo requerido"}), 400
    content, filename, _ = upload
    try:
        text = content.decode("utf-8")
    except UnicodeDecodeError:
        return jsonify({"ok": False, "error": "El archivo debe estar en UTF-8"}), 400
    return respond(get_container().inventory_service.bulk_import(text, filename))


# -- Pedidos -----------------------------------------------------------------

@admin_bp.route("/orders", methods=["GET"])
@admin_required
def admin_orders():
    return jsonify({"ok": True, "orders": get_container().inventory_service.list_orders()})


@admin_bp.route("/orders/clear", methods=["POST"])
@admin_required
@verify_csrf
def admin_orders_clear():
    return respond(get_container().inventory_service.clear_orders())


# -- Configuración -----------------------------------------------------------

@admin_bp.route("/settings", methods=["GET", "POST"])
@admin_required
@verify_csrf
def admin_settings():
    container = get_container()
    if request.method == "POST":
        return respond(container.inventory_service.update_config(json_body()))
    return jsonify({
        "ok": True,
        "config": container.inventory_service.get_config(),
        "drive": container.image_service.drive_status(),
        "mode": container.mode_controller.status(),
    })


@admin_bp.route("/drive/connect", methods=["POST"])
@admin_required
@verify_csrf
def admin_drive_connect():
    data = json_body()
    return respond(get_container().image_service.connect_drive(
        data.get("accessToken"), data.get("expiresIn")
    ))


@admin_bp.route("/drive/disconnect", methods=["POST"])
@admin_required
@verify_csrf
def admin_drive_disconnect():
    return respond(get_container().image_service.disconnect_drive())


# -- Imágenes ----------------------------------------------------------------

@admin_bp.route("/images/upload", methods=["POST"])
@admin_required
@verify_csrf
def admin_images_upload():
    upload = read_upload()
    if upload is None:
        return jsonify({"ok": False, "error": "Archivo requerido"}), 400
    content, filename, mime_type = upload
    return respond(get_container().image_service.upload(content, filename, mime_type), error_status=502)


@admin_bp.route("/images/analyze", methods=["POST"])
@admin_required
@verify_csrf
def admin_images_analyze():
    upload = read_upload()
    if upload is None:
        return jsonify({"ok": False, "error": "Archivo requerido"}), 400
    content, _, mime_type = upload
    return respond(get_container().image_service.analyze(content, mime_type), error_status=502)


@admin_bp.route("/images/url", methods=["POST"])
@admin_required
@verify_csrf
def admin_images_url():
    return respond(get_container().image_service.set_url(json_body().get("url")))


# ═══════════════════════════════════════════════════════════════════════════
# FÁBRICA DE LA APLICACIÓN
# ═══════════════════════════════════════════════════════════════════════════

def create_app(config_overrides=None, gateway_factory=None, http_session=None):
    """
    Crea la aplicación Flask.

    Args:
        config_overrides: Opciones que reemplazan a Config (tests)
        gateway_factory: Fábrica del gateway remoto (tests)
        http_session: Sesión de requests para Gemini/Drive (tests)
    """
    app = Flask(__name__)
    app.config.from_object(Config)
    if config_overrides:
        app.config.update(config_overrides)
    Config.validate(app.config)

    os.makedirs(app.config["DATA_DIR"], exist_ok=True)

    AppContainer.reset_instance()
    container = AppContainer(app.config, gateway_factory=gateway_factory, http=http_session)
    app.extensions["uniprice"] = container

    app.register_blueprint(shop_bp, url_prefix="/api")
    app.register_blueprint(admin_bp, url_prefix="/api/admin")

    @app.after_request
    def set_security_headers(response):
        response.headers['X-Frame-Options'] = 'DENY'
        response.headers['X-Content-Type-Options'] = 'nosniff'
        response.headers['Referrer-Policy'] = 'no-referrer-when-downgrade'
        return response

    @app.errorhandler(404)
    def not_found(e):
        return jsonify({"ok": False, "error": "not_found"}), 404

    @app.errorhandler(413)
    def too_large(e):
        return jsonify({"ok": False, "error": "Archivo demasiado grande"}), 413

    @app.errorhandler(Exception)
    def unhandled(e):
        code = getattr(e, "code", None)
        if isinstance(code, int) and code < 500:
            return jsonify({"ok": False, "error": getattr(e, "description", str(e))}), code
        logger.exception(f"[HTTP] Error no controlado en {request.path}")
        return jsonify({"ok": False, "error": "Error interno"}), 500

    container.mode_controller.start()
    logger.info(f"[APP] Tienda iniciada en modo {container.mode_controller.mode.value}")
    return app


if __name__ == "__main__":
    DEBUG = os.environ.get('FLASK_DEBUG', '0') == '1'
    HOST = os.environ.get('FLASK_HOST', '0.0.0.0')
    PORT = int(os.environ.get('FLASK_PORT', 5000))
    create_app().run(host=HOST, port=PORT, debug=DEBUG)
