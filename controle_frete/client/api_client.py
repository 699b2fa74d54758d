# controle_frete/client/api_client.py
# Cliente HTTP da API de fretes/preços (X-Session-Token em todas as chamadas).

from typing import Any, Dict, List, Optional

import requests

from controle_frete.utils.logger import logger
from .errors import ClientError, TransientNetworkError, SessionExpiredError, RequestRejectedError

SESSION_HEADER = 'X-Session-Token'


class ApiClient:
    """
    Thin wrapper over requests for the /api endpoints.
    Every call carries the session token and a bounded timeout; failures are mapped to
    TransientNetworkError (network or 5xx), SessionExpiredError (401) or RequestRejectedError (other 4xx).
    """

    def __init__(self, base_url: str, session_token: Optional[str] = None, timeout: int = 10,
                 http: Optional[requests.Session] = None):
        self.base_url = base_url.rstrip('/')
        self.session_token = session_token
        self.timeout = timeout
        self.http = http or requests.Session()
        logger.debug(f"ApiClient initialized for {self.base_url} (timeout {timeout}s).")

    def _headers(self) -> Dict[str, str]:
        headers = {'Accept': 'application/json', 'Cache-Control': 'no-cache'}
        if self.session_token:
            headers[SESSION_HEADER] = self.session_token
        return headers

    def _request(self, method: str, path: str, params: Optional[Dict[str, Any]] = None,
                 json_payload: Optional[Any] = None) -> Any:
        url = f"{self.base_url}{path}"
        logger.debug(f"API call: {method} {url} params={params}")
        try:
            response = self.http.request(
                method, url, params=params, json=json_payload,
                headers=self._headers(), timeout=self.timeout,
            )
        except requests.exceptions.Timeout as e:
            logger.warning(f"Timeout on {method} {url}: {e}")
            raise TransientNetworkError("Tempo de resposta esgotado.") from e
        except requests.exceptions.RequestException as e:
            logger.warning(f"Network error on {method} {url}: {e}")
            raise TransientNetworkError(f"Falha de conexão: {e}") from e

        if response.status_code == 401:
            logger.warning(f"Session rejected by the API on {method} {url}.")
            raise SessionExpiredError(status_code=401, payload=self._payload(response))

        if not response.ok:
            payload = self._payload(response)
            message = payload.get('error') or f"HTTP {response.status_code}"
            if payload.get('details'):
                message = f"{message}: {payload['details']}"
            if response.status_code >= 500:
                logger.warning(f"Server error on {method} {url}: HTTP {response.status_code} - {message}")
                raise TransientNetworkError(message, status_code=response.status_code, payload=payload)
            logger.error(f"API rejected {method} {url}: HTTP {response.status_code} - {message}")
            raise RequestRejectedError(message, status_code=response.status_code, payload=payload)

        try:
            return response.json()
        except ValueError as e:
            logger.error(f"Non-JSON response from {method} {url}. Status: {response.status_code}, Response: {response.text[:200]}")
            raise ClientError("Resposta inválida do servidor.", status_code=response.status_code) from e

    @staticmethod
    def _payload(response: requests.Response) -> Dict[str, Any]:
        try:
            data = response.json()
        except ValueError:
            return {}
        return data if isinstance(data, dict) else {}

    # --- Fretes ---

    def list_fretes(self) -> List[Dict[str, Any]]:
        return self._request('GET', '/fretes')

    def get_frete(self, frete_id: int) -> Dict[str, Any]:
        return self._request('GET', f'/fretes/{frete_id}')

    def create_frete(self, data: Dict[str, Any]) -> Dict[str, Any]:
        return self._request('POST', '/fretes', json_payload=data)

    def update_frete(self, frete_id: int, data: Dict[str, Any]) -> Dict[str, Any]:
        return self._request('PUT', f'/fretes/{frete_id}', json_payload=data)

    def patch_status(self, frete_id: int, status: Optional[str] = None,
                     data_entrega: Optional[str] = None) -> Dict[str, Any]:
        body: Dict[str, Any] = {}
        if status is not None:
            body['status'] = status
            body['data_entrega'] = data_entrega
        return self._request('PATCH', f'/fretes/{frete_id}', json_payload=body)

    def delete_frete(self, frete_id: int) -> Dict[str, Any]:
        return self._request('DELETE', f'/fretes/{frete_id}')

    def list_atrasados(self) -> List[Dict[str, Any]]:
        return self._request('GET', '/fretes/atrasados')

    # --- Preços ---

    def list_precos(self, page: int = 1, limit: int = 50, marca: Optional[str] = None,
                    search: Optional[str] = None) -> Dict[str, Any]:
        params: Dict[str, Any] = {'page': page, 'limit': limit}
        if marca and marca != 'TODAS':
            params['marca'] = marca
        if search:
            params['search'] = search
        return self._request('GET', '/precos', params=params)

    def create_preco(self, data: Dict[str, Any]) -> Dict[str, Any]:
        return self._request('POST', '/precos', json_payload=data)

    def update_preco(self, preco_id: int, data: Dict[str, Any]) -> Dict[str, Any]:
        return self._request('PUT', f'/precos/{preco_id}', json_payload=data)

    def delete_preco(self, preco_id: int) -> Dict[str, Any]:
        return self._request('DELETE', f'/precos/{preco_id}')

    def list_marcas(self) -> List[str]:
        return self._request('GET', '/marcas')
