# controle_frete/__init__.py
# Controle de Frete: backend Flask e cliente de sincronização.
