"""演示数据 -- 一个砌体 + LSF 混合改造项目的初始任务与用户"""

from datetime import UTC, date, datetime

from .models.enums import (
    ConstructionSystem,
    ExecutionStatus,
    GateStatus,
    ProjectStage,
    UserRole,
)
from .models.task import GateCheck, Subtask, Task, TaskPhoto
from .models.user import User

DEMO_USERS: list[User] = [
    User(id="u1", name="Eng. Carlos (GP)", role=UserRole.PROJECT_MANAGER),
    User(id="u2", name="Mestre João (Executor)", role=UserRole.FIELD_EXECUTOR),
    User(id="u3", name="Cliente Ana", role=UserRole.CLIENT),
]


def demo_tasks() -> list[Task]:
    """每次调用返回新的任务列表"""
    return [
        Task(
            id="t1",
            title="Avaliação Estrutural Térreo",
            description="Verificar capacidade de carga das vigas de alvenaria para receber o LSF.",
            stage=ProjectStage.PRELIMINARY,
            system=ConstructionSystem.MASONRY,
            specialist="Eng. Estrutural",
            executor="Equipe Civil",
            date_start_expected=date(2023, 10, 1),
            date_end_expected=date(2023, 10, 3),
            status=ExecutionStatus.EXECUTED,
            gate=GateCheck(
                status=GateStatus.APPROVED,
                notes="Liberado para carga.",
                approver="Eng. Carlos (GP)",
                date=datetime(2023, 10, 4, tzinfo=UTC),
            ),
            is_transition_point=True,
            transition_tag="#VigaTransição",
            subtasks=[
                Subtask(id="st1", title="Verificar trincas na viga V1", completed=True),
                Subtask(id="st2", title="Medir nivelamento", completed=True),
            ],
        ),
        Task(
            id="t2",
            title="Montagem Sole Plate (Guia Inferior)",
            description="Fixação das guias inferiores com chumbadores químicos sobre a cinta de concreto.",
            stage=ProjectStage.STRUCTURAL,
            system=ConstructionSystem.HYBRID,
            specialist="Proj. LSF",
            executor="Montadores LSF",
            date_start_expected=date(2023, 10, 5),
            date_end_expected=date(2023, 10, 7),
            status=ExecutionStatus.EXECUTED,
            is_transition_point=True,
            transition_tag="#Ancoragem",
            photos=[
                TaskPhoto(
                    id="p1",
                    url="https://picsum.photos/id/201/400/300",
                    timestamp=datetime(2023, 10, 5, 10, 0, tzinfo=UTC),
                    description="Detalhe chumbador",
                )
            ],
        ),
        Task(
            id="t3",
            title="Painéis de Parede 2º Pav.",
            description="Montagem dos painéis estruturais conforme caderno de montagem.",
            stage=ProjectStage.STRUCTURAL,
            system=ConstructionSystem.LSF,
            specialist="Proj. LSF",
            executor="Montadores LSF",
            date_start_expected=date(2023, 10, 8),
            date_end_expected=date(2023, 10, 15),
            status=ExecutionStatus.IN_PROGRESS,
        ),
        Task(
            id="t4",
            title="Passagem Elétrica Paredes",
            description="Infraestrutura elétrica interna antes do fechamento.",
            stage=ProjectStage.ENCLOSURE_INFRA,
            system=ConstructionSystem.INSTALLATION,
            specialist="Eng. Elétrica",
            executor="Eletricista",
            date_start_expected=date(2023, 10, 16),
            date_end_expected=date(2023, 10, 18),
            status=ExecutionStatus.BLOCKED,
            blocked_reason='Falta de eletrodutos corrugados 3/4"',
        ),
        Task(
            id="t5",
            title="Conexão Hidráulica Prumada",
            description="Interligação da prumada existente (Alv) com nova rede (PEX).",
            stage=ProjectStage.ENCLOSURE_INFRA,
            system=ConstructionSystem.HYBRID,
            specialist="Eng. Hidráulica",
            executor="Encanador",
            date_start_expected=date(2023, 10, 18),
            date_end_expected=date(2023, 10, 19),
            is_transition_point=True,
            transition_tag="#ConexãoHidráulica",
        ),
    ]
