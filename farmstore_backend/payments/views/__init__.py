# payments/views/__init__.py
