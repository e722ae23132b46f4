"""任务摘要导出 -- 纯文本格式，供现场分享/下载"""

import re

from .models.task import Task

_SEPARATOR = "-" * 32


def render_task_summary(task: Task) -> str:
    """渲染任务摘要文本（标题、状态、体系、执行班组、期限、描述、检查清单）"""
    if task.subtasks:
        checklist = "\n".join(
            f"- [{'X' if st.completed else ' '}] {st.title}" for st in task.subtasks
        )
    else:
        checklist = "Nenhuma subtarefa."

    lines = [
        "RESUMO DA TAREFA",
        _SEPARATOR,
        f"Título: {task.title}",
        f"ID: {task.id}",
        f"Status: {task.status}",
        f"Sistema: {task.system}",
        f"Executor: {task.executor}",
        f"Prazo: {task.date_end_expected.strftime('%d/%m/%Y')}",
        _SEPARATOR,
        "DESCRIÇÃO:",
        task.description,
        _SEPARATOR,
        "CHECKLIST:",
        checklist,
    ]
    return "\n".join(lines) + "\n"


def summary_filename(task: Task) -> str:
    """下载文件名：非 ASCII 字母数字字符替换为 '-'"""
    slug = re.sub(r"[^a-z0-9]", "-", task.title, flags=re.IGNORECASE).lower()
    return f"tarefa-{slug}.txt"
