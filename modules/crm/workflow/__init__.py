"""
Сводка рабочего процесса для главной панели
"""

from modules.crm.workflow.workflow_service import WorkflowService, WorkflowSnapshot

__all__ = ['WorkflowService', 'WorkflowSnapshot']
