"""
Core — общие компоненты витрины: конфигурация и request-метрики.
"""
