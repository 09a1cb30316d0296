"""
Модуль CRM: брокерские сделки и сводка рабочего процесса
"""
