# controle_frete/api/routes/fretes.py
# Endpoints do controle de fretes (CRUD, alternância de status, observações e visões).

from flask import Blueprint, request, jsonify, current_app

from controle_frete.services.frete_service import FreteService
from controle_frete.services.session_service import session_username
from controle_frete.api.decorators import session_required
from controle_frete.api.errors import NotFoundError, ValidationError, ServiceError, DatabaseError
from controle_frete.utils.logger import logger

fretes_bp = Blueprint('fretes', __name__)

# Helper para obter FreteService
def _get_frete_service() -> FreteService:
    service = current_app.config.get('frete_service')
    if not service:
        logger.critical("FreteService not found in application config!")
        raise ServiceError("Serviço de fretes indisponível.", 503)
    return service

def _json_body():
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else {}

def _failure(action: str, error: Exception):
    msg = error.message if hasattr(error, 'message') else str(error)
    return jsonify({"error": f"Erro ao {action}", "details": msg}), 500


@fretes_bp.route('/fretes', methods=['GET'])
@session_required
def list_fretes():
    logger.info("Listando fretes.")
    try:
        fretes = _get_frete_service().list_fretes()
        return jsonify([f.to_dict() for f in fretes]), 200
    except (ServiceError, DatabaseError) as e:
        logger.error(f"Erro ao buscar fretes: {e}", exc_info=True)
        return _failure("buscar fretes", e)


@fretes_bp.route('/fretes/atrasados', methods=['GET'])
@session_required
def list_fretes_atrasados():
    """Fretes fora do prazo, ordenados pela previsão de entrega."""
    try:
        fretes = _get_frete_service().list_atrasados()
        return jsonify([f.to_dict() for f in fretes]), 200
    except (ServiceError, DatabaseError) as e:
        logger.error(f"Erro ao buscar fretes atrasados: {e}", exc_info=True)
        return _failure("buscar fretes atrasados", e)


@fretes_bp.route('/fretes/dashboard', methods=['GET'])
@session_required
def get_dashboard():
    mes = request.args.get('mes')
    try:
        return jsonify(_get_frete_service().get_dashboard(mes)), 200
    except ValidationError as e:
        logger.warning(f"Parâmetro 'mes' inválido no dashboard: {e}")
        return jsonify({"error": str(e)}), 400
    except (ServiceError, DatabaseError) as e:
        logger.error(f"Erro ao montar dashboard ({mes}): {e}", exc_info=True)
        return _failure("montar dashboard", e)


@fretes_bp.route('/fretes/grafico', methods=['GET'])
@session_required
def get_grafico():
    ano = request.args.get('ano')
    try:
        return jsonify(_get_frete_service().get_grafico(ano)), 200
    except ValidationError as e:
        logger.warning(f"Parâmetro 'ano' inválido no gráfico: {e}")
        return jsonify({"error": str(e)}), 400
    except (ServiceError, DatabaseError) as e:
        logger.error(f"Erro ao montar gráfico ({ano}): {e}", exc_info=True)
        return _failure("montar gráfico", e)


@fretes_bp.route('/fretes/filtros', methods=['GET'])
@session_required
def get_filtros():
    """Valores distintos para os filtros (transportadoras, vendedores, status)."""
    try:
        return jsonify(_get_frete_service().get_filter_options()), 200
    except (ServiceError, DatabaseError) as e:
        logger.error(f"Erro ao buscar opções de filtro: {e}", exc_info=True)
        return _failure("buscar filtros", e)


@fretes_bp.route('/fretes/<int:frete_id>', methods=['GET'])
@session_required
def get_frete(frete_id: int):
    try:
        return jsonify(_get_frete_service().get_frete(frete_id).to_dict()), 200
    except NotFoundError as e:
        return jsonify({"error": str(e)}), 404
    except (ServiceError, DatabaseError) as e:
        logger.error(f"Erro ao buscar frete {frete_id}: {e}", exc_info=True)
        return _failure("buscar frete", e)


@fretes_bp.route('/fretes', methods=['POST'])
@session_required
def create_frete():
    data = _json_body()
    logger.info(f"Criando frete: NF {data.get('numero_nf')!r}")
    try:
        frete = _get_frete_service().create_frete(data)
        return jsonify(frete.to_dict()), 201
    except ValidationError as e:
        logger.warning(f"Validação falhou ao criar frete: {e}")
        return jsonify({"error": str(e)}), 400
    except (ServiceError, DatabaseError) as e:
        logger.error(f"Erro ao criar frete: {e}", exc_info=True)
        return _failure("criar frete", e)


@fretes_bp.route('/fretes/<int:frete_id>', methods=['PUT'])
@session_required
def update_frete(frete_id: int):
    data = _json_body()
    logger.info(f"Atualizando frete {frete_id}.")
    try:
        frete = _get_frete_service().update_frete(frete_id, data)
        return jsonify(frete.to_dict()), 200
    except ValidationError as e:
        logger.warning(f"Validação falhou ao atualizar frete {frete_id}: {e}")
        return jsonify({"error": str(e)}), 400
    except NotFoundError as e:
        return jsonify({"error": str(e)}), 404
    except (ServiceError, DatabaseError) as e:
        logger.error(f"Erro ao atualizar frete {frete_id}: {e}", exc_info=True)
        return _failure("atualizar frete", e)


@fretes_bp.route('/fretes/<int:frete_id>', methods=['PATCH'])
@session_required
def patch_frete_status(frete_id: int):
    """Checkbox de entrega: corpo {status, data_entrega?}; sem status o servidor alterna."""
    data = _json_body()
    logger.info(f"Toggle status do frete {frete_id} para: {data.get('status')}")
    try:
        frete = _get_frete_service().patch_status(frete_id, data)
        return jsonify(frete.to_dict()), 200
    except ValidationError as e:
        logger.warning(f"Validação falhou ao alterar status do frete {frete_id}: {e}")
        return jsonify({"error": str(e)}), 400
    except NotFoundError as e:
        return jsonify({"error": str(e)}), 404
    except (ServiceError, DatabaseError) as e:
        logger.error(f"Erro ao atualizar status do frete {frete_id}: {e}", exc_info=True)
        return _failure("atualizar status", e)


@fretes_bp.route('/fretes/<int:frete_id>', methods=['DELETE'])
@session_required
def delete_frete(frete_id: int):
    logger.info(f"Deletando frete: {frete_id}")
    try:
        _get_frete_service().delete_frete(frete_id)
        return jsonify({"message": "Frete excluído com sucesso"}), 200
    except NotFoundError as e:
        return jsonify({"error": str(e)}), 404
    except (ServiceError, DatabaseError) as e:
        logger.error(f"Erro ao excluir frete {frete_id}: {e}", exc_info=True)
        return _failure("excluir frete", e)


@fretes_bp.route('/fretes/<int:frete_id>/observacoes', methods=['POST'])
@session_required
def add_observacao(frete_id: int):
    """Acrescenta uma observação; o autor é o usuário da sessão do portal."""
    data = _json_body()
    username = session_username(getattr(request, 'current_session', None))
    try:
        frete = _get_frete_service().add_observacao(frete_id, data.get('texto'), username)
        return jsonify(frete.to_dict()), 201
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400
    except NotFoundError as e:
        return jsonify({"error": str(e)}), 404
    except (ServiceError, DatabaseError) as e:
        logger.error(f"Erro ao adicionar observação ao frete {frete_id}: {e}", exc_info=True)
        return _failure("adicionar observação", e)


@fretes_bp.route('/fretes/<int:frete_id>/observacoes/<int:index>', methods=['DELETE'])
@session_required
def remove_observacao(frete_id: int, index: int):
    try:
        frete = _get_frete_service().remove_observacao(frete_id, index)
        return jsonify(frete.to_dict()), 200
    except NotFoundError as e:
        return jsonify({"error": str(e)}), 404
    except (ServiceError, DatabaseError) as e:
        logger.error(f"Erro ao remover observação {index} do frete {frete_id}: {e}", exc_info=True)
        return _failure("remover observação", e)
