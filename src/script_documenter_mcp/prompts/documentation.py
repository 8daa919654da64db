"""Documentation prompt templates.

DOCUMENTATION_POLICY: the JSDoc convention the model must follow. One
template; the wording that differs per documentation language lives in
POLICY_TERMS. Variables: the keys of a POLICY_TERMS entry.
DOCUMENTATION_SYSTEM: system instruction for a single documentation call.
Variables: {language}, {doc_language_name}, {project_context}, {policy}.
"""

from __future__ import annotations

DOC_LANGUAGE_NAMES: dict[str, str] = {
    "en": "English",
    "ru": "Russian",
}

POLICY_TERMS: dict[str, dict[str, str]] = {
    "en": {
        "required_title": "Required",
        "required": "Every global function (function declaration) MUST have a JSDoc block.",
        "description_title": "Description",
        "description": (
            "The JSDoc block MUST start with a `@description` tag with a clear description "
            "of the function's purpose in English."
        ),
        "params_title": "Parameters",
        "param_each": "A `@param` tag MUST be present for EACH function parameter.",
        "param_format": "The tag must follow the format: `{@param {type} parameter_name - Description}`.",
        "param_type": "The type must be specified",
        "returns_title": "Return Value",
        "returns_when": (
            "If the function returns a value (contains a `return` statement), "
            "it MUST have a `@returns` tag."
        ),
        "returns_format": "The tag must follow the format: `{@returns {type} - Description}`.",
        "module_title": "Module",
        "module": "For logical grouping, every function MUST have a `{@module {ModuleName}}` tag.",
        "entrypoint_title": "Entrypoint",
        "entrypoint": (
            "If a function is an entrypoint (called by a trigger, from a menu, etc.), "
            "it MUST be marked with the `{@entrypoint}` tag."
        ),
        "example": "For example",
    },
    "ru": {
        "required_title": "Обязательное наличие",
        "required": "Каждая глобальная функция (function declaration) ДОЛЖНА иметь JSDoc-блок.",
        "description_title": "Описание",
        "description": (
            "JSDoc-блок ДОЛЖЕН начинаться с тега `@description` с понятным описанием "
            "назначения функции на русском языке."
        ),
        "params_title": "Параметры",
        "param_each": "Для КАЖДОГО параметра функции ДОЛЖЕН присутствовать тег `@param`.",
        "param_format": "Тег должен иметь формат: `{@param {тип} имя_параметра - Описание}`.",
        "param_type": "Тип должен быть указан",
        "returns_title": "Возвращаемое значение",
        "returns_when": (
            "Если функция возвращает значение (содержит оператор `return`), "
            "она ДОЛЖНА иметь тег `@returns`."
        ),
        "returns_format": "Тег должен иметь формат: `{@returns {тип} - Описание}`.",
        "module_title": "Модуль",
        "module": "Для логической группировки, каждая функция ДОЛЖНА иметь тег `{@module {ИмяМодуля}}`.",
        "entrypoint_title": "Точка входа",
        "entrypoint": (
            "Если функция является точкой входа (вызывается триггером, из меню и т.д.), "
            "она ДОЛЖНА быть помечена тегом `{@entrypoint}`."
        ),
        "example": "Например",
    },
}

DOCUMENTATION_POLICY = """\
Strictly adhere to the following JSDoc documentation policy:

1.  **{required_title}:** {required}
2.  **{description_title} (@description):** {description}
3.  **{params_title} (@param):**
    *   {param_each}
    *   {param_format}
    *   {param_type} (e.g., {{string}}, {{number}}, {{GoogleAppsScript.Spreadsheet.Sheet}}, {{Object[]}}).
4.  **{returns_title} (@returns):**
    *   {returns_when}
    *   {returns_format}
5.  **{module_title} (@module):**
    *   {module} {example}, {{DataProcessing}}, {{UI}}, {{API_Integration}}. \
You must infer the module name from the file name and project context.
6.  **{entrypoint_title} (@entrypoint):**
    *   {entrypoint} You should infer if a function is an entrypoint from its name \
(e.g., 'onOpen', 'doGet') or context."""

DOCUMENTATION_SYSTEM = """\
You are an expert developer specializing in writing JSDoc documentation for {language} code.
Your task is to analyze the provided script and add a JSDoc comment block directly above each \
function declaration. The documentation comments you write MUST be in {doc_language_name}.

To help you understand the project's purpose, goals, and recent changes, I am providing the \
project's file structure and the content of its README and CHANGELOG files. Use this information \
to write more insightful and context-aware descriptions for functions, especially noting how a \
function might relate to the overall goals described in the README.

--- PROJECT CONTEXT ---
{project_context}
--- END PROJECT CONTEXT ---

{policy}

If the file does not contain any functions that require documentation, return the original \
script content without any changes or comments.

You MUST return ONLY the fully documented script. Do not add any introductory text, closing \
remarks, or markdown code fences. The script you are documenting is provided as the user content."""


def render_policy(doc_language: str) -> str:
    """Render the documentation policy for *doc_language* ("en" or "ru")."""
    try:
        terms = POLICY_TERMS[doc_language]
    except KeyError:
        allowed = ", ".join(sorted(POLICY_TERMS))
        raise ValueError(f"Unsupported documentation language '{doc_language}'. Allowed: {allowed}") from None
    return DOCUMENTATION_POLICY.format(**terms)


def build_system_instruction(language: str, project_context: str, doc_language: str) -> str:
    """Assemble the full system instruction for one documentation call."""
    policy = render_policy(doc_language)
    return DOCUMENTATION_SYSTEM.format(
        language=language,
        doc_language_name=DOC_LANGUAGE_NAMES[doc_language],
        project_context=project_context,
        policy=policy,
    )
