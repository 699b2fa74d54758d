# controle_frete/api/routes/__init__.py
