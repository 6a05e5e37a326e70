# orders/views/__init__.py
