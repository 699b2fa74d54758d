# controle_frete/api/routes/precos.py
# Endpoints da tabela de preços.

from flask import Blueprint, request, jsonify, current_app

from controle_frete.services.preco_service import PrecoService
from controle_frete.api.decorators import session_required
from controle_frete.api.errors import NotFoundError, ValidationError, ServiceError, DatabaseError
from controle_frete.utils.logger import logger

precos_bp = Blueprint('precos', __name__)

def _get_preco_service() -> PrecoService:
    service = current_app.config.get('preco_service')
    if not service:
        logger.critical("PrecoService not found in application config!")
        raise ServiceError("Serviço de preços indisponível.", 503)
    return service

def _failure(action: str, error: Exception):
    msg = error.message if hasattr(error, 'message') else str(error)
    return jsonify({"error": f"Erro ao {action}", "details": msg}), 500


@precos_bp.route('/precos', methods=['GET'])
@session_required
def list_precos():
    """Página de preços: ?page=1&limit=50&marca=X&search=termo"""
    args = request.args
    try:
        result = _get_preco_service().list_precos(
            page=args.get('page'), limit=args.get('limit'),
            marca=args.get('marca'), search=args.get('search'),
        )
        return jsonify(result), 200
    except ValidationError as e:
        logger.warning(f"Parâmetros de paginação inválidos: {e}")
        return jsonify({"error": str(e)}), 400
    except (ServiceError, DatabaseError) as e:
        logger.error(f"Erro ao buscar preços: {e}", exc_info=True)
        return _failure("buscar preços", e)


@precos_bp.route('/precos/<int:preco_id>', methods=['GET'])
@session_required
def get_preco(preco_id: int):
    try:
        return jsonify(_get_preco_service().get_preco(preco_id).to_dict()), 200
    except NotFoundError as e:
        return jsonify({"error": str(e)}), 404
    except (ServiceError, DatabaseError) as e:
        logger.error(f"Erro ao buscar preço {preco_id}: {e}", exc_info=True)
        return _failure("buscar preço", e)


@precos_bp.route('/precos', methods=['POST'])
@session_required
def create_preco():
    data = request.get_json(silent=True) or {}
    try:
        preco = _get_preco_service().create_preco(data)
        return jsonify(preco.to_dict()), 201
    except ValidationError as e:
        logger.warning(f"Validação falhou ao criar preço: {e}")
        return jsonify({"error": str(e)}), 400
    except (ServiceError, DatabaseError) as e:
        logger.error(f"Erro ao criar preço: {e}", exc_info=True)
        return _failure("criar preço", e)


@precos_bp.route('/precos/<int:preco_id>', methods=['PUT'])
@session_required
def update_preco(preco_id: int):
    data = request.get_json(silent=True) or {}
    try:
        preco = _get_preco_service().update_preco(preco_id, data)
        return jsonify(preco.to_dict()), 200
    except ValidationError as e:
        logger.warning(f"Validação falhou ao atualizar preço {preco_id}: {e}")
        return jsonify({"error": str(e)}), 400
    except NotFoundError as e:
        return jsonify({"error": str(e)}), 404
    except (ServiceError, DatabaseError) as e:
        logger.error(f"Erro ao atualizar preço {preco_id}: {e}", exc_info=True)
        return _failure("atualizar preço", e)


@precos_bp.route('/precos/<int:preco_id>', methods=['DELETE'])
@session_required
def delete_preco(preco_id: int):
    try:
        _get_preco_service().delete_preco(preco_id)
        return jsonify({"message": "Preço excluído com sucesso"}), 200
    except NotFoundError as e:
        return jsonify({"error": str(e)}), 404
    except (ServiceError, DatabaseError) as e:
        logger.error(f"Erro ao excluir preço {preco_id}: {e}", exc_info=True)
        return _failure("excluir preço", e)


@precos_bp.route('/marcas', methods=['GET'])
@session_required
def list_marcas():
    try:
        return jsonify(_get_preco_service().list_marcas()), 200
    except (ServiceError, DatabaseError) as e:
        logger.error(f"Erro ao buscar marcas: {e}", exc_info=True)
        return _failure("buscar marcas", e)
