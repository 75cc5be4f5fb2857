"""
템플릿 태그 스캐너 / 진단.

Jinja2는 첫 번째 문법 에러에서 멈추기 때문에, 렌더링이 실패하면
템플릿의 보이는 텍스트를 직접 훑어서 문제 있는 태그를 전부 모은다.

진단 항목:
- 열리고 닫히지 않은 태그 ({{ foo), 짝 없는 닫기 (foo }})
- 구분자 불일치 ({{ foo %})
- 빈 태그, 표현식 문법 에러
- 블록 구조 (for/if/... 미종료, end 태그 불일치, 위치가 잘못된 else/elif)
- 알 수 없는 블록 키워드

docxtpl 전용 접두사 ({%p, {%tr, {%tc, {%r, {{p, {{r)는 허용된다.
"""

import re
from dataclasses import dataclass

from jinja2 import Environment, TemplateSyntaxError

from docfill.domain.errors import TagIssue

# {{ name }} (공백 허용, 이름은 영문/숫자/./_/-)
PLACEHOLDER_PATTERN = re.compile(r"\{\{\s*([A-Za-z0-9_.-]+)\s*\}\}")

_DELIMITERS = re.compile(r"\{\{|\{%|\{#|\}\}|%\}|#\}")
_PAIRS = {"{{": "}}", "{%": "%}", "{#": "#}"}
_KINDS = {"{{": "variable", "{%": "block", "{#": "comment"}
_DOCX_PREFIX = re.compile(r"^(?:tr|tc|p|r)\s")
_KEYWORD = re.compile(r"^([A-Za-z_]+)")

# 블록 키워드 → 닫기 키워드
_BLOCK_ENDS = {
    "for": "endfor",
    "if": "endif",
    "with": "endwith",
    "macro": "endmacro",
    "call": "endcall",
    "filter": "endfilter",
    "block": "endblock",
    "raw": "endraw",
    "autoescape": "endautoescape",
}
_INTERMEDIATE = {"else": ("if", "for"), "elif": ("if",)}
_STANDALONE = {"set", "include", "import", "from", "extends"}
_NOUNS = {"for": "loop", "if": "condition"}

SNIPPET_LENGTH = 40


@dataclass(frozen=True)
class Tag:
    """스캔된 태그 하나."""

    kind: str  # variable | block | comment
    raw: str
    body: str
    start: int


def find_placeholders(text: str) -> list[str]:
    """
    텍스트에서 {{ name }} 토큰 이름 추출.

    Returns:
        첫 등장 순서를 유지한 중복 없는 이름 목록
    """
    return list(dict.fromkeys(PLACEHOLDER_PATTERN.findall(text)))


def _snippet(text: str) -> str:
    flat = " ".join(text.split())
    if len(flat) > SNIPPET_LENGTH:
        return flat[:SNIPPET_LENGTH] + "..."
    return flat


def _body(inner: str) -> str:
    """태그 내부 → 비교용 본문 (docxtpl 접두사, 공백 제어 문자 제거)."""
    inner = _DOCX_PREFIX.sub("", inner, count=1)
    body = inner.strip()
    if body[:1] in ("-", "+"):
        body = body[1:]
    if body[-1:] in ("-", "+"):
        body = body[:-1]
    return body.strip()


def scan_tags(text: str) -> tuple[list[Tag], list[tuple[int, TagIssue]]]:
    """
    텍스트를 태그 단위로 분해.

    Returns:
        (닫힌 태그 목록, 구분자 수준 문제 목록[(위치, TagIssue)])
    """
    tags: list[Tag] = []
    issues: list[tuple[int, TagIssue]] = []
    open_delim: str | None = None
    open_pos = -1
    in_raw = False

    for match in _DELIMITERS.finditer(text):
        delim = match.group()

        if delim in _PAIRS:
            if open_delim == "{#":
                continue
            if in_raw:
                # raw 블록 안에서는 {% endraw %}만 찾는다
                if delim == "{%":
                    open_delim, open_pos = delim, match.start()
                continue
            if open_delim is not None:
                fragment = _snippet(text[open_pos:match.start()])
                issues.append((open_pos, TagIssue(
                    fragment,
                    f'The tag beginning with "{fragment}" is unclosed',
                )))
            open_delim, open_pos = delim, match.start()
            continue

        if open_delim is None:
            if in_raw:
                continue
            fragment = _snippet(text[max(0, match.start() - SNIPPET_LENGTH):match.end()])
            issues.append((match.start(), TagIssue(
                fragment,
                f'The tag ending with "{fragment}" is unopened',
            )))
            continue

        if _PAIRS[open_delim] != delim:
            if open_delim == "{#":
                continue
            if not in_raw:
                fragment = _snippet(text[open_pos:match.end()])
                issues.append((open_pos, TagIssue(
                    fragment,
                    f'The tag "{fragment}" has mismatched delimiters',
                )))
            open_delim = None
            continue

        tag = Tag(
            kind=_KINDS[open_delim],
            raw=_snippet(text[open_pos:match.end()]),
            body=_body(text[open_pos + 2:match.start()]),
            start=open_pos,
        )
        open_delim = None

        if in_raw:
            if tag.body == "endraw":
                in_raw = False
                tags.append(tag)
            continue
        if tag.kind == "block" and tag.body == "raw":
            in_raw = True
        tags.append(tag)

    if open_delim is not None and open_delim != "{#" and not in_raw:
        fragment = _snippet(text[open_pos:])
        issues.append((open_pos, TagIssue(
            fragment,
            f'The tag beginning with "{fragment}" is unclosed',
        )))

    return tags, issues


class TagDiagnostics:
    """
    태그 목록 → 문제 목록.

    Usage:
        issues = TagDiagnostics().diagnose(text)
    """

    def __init__(self, env: Environment | None = None):
        self.env = env or Environment()

    def _syntax_error(self, source: str) -> str | None:
        try:
            self.env.parse(source)
        except TemplateSyntaxError as e:
            return e.message or str(e)
        return None

    def _check_variable(self, tag: Tag) -> TagIssue | None:
        if not tag.body:
            return TagIssue(tag.raw, f'The tag "{tag.raw}" is empty')
        error = self._syntax_error("{{ %s }}" % tag.body)
        if error:
            return TagIssue(tag.raw, f'Invalid expression in "{tag.raw}": {error}')
        return None

    def _check_blocks(self, tags: list[Tag]) -> list[tuple[int, TagIssue]]:
        issues: list[tuple[int, TagIssue]] = []
        stack: list[tuple[str, Tag]] = []

        for tag in tags:
            if tag.kind != "block":
                continue

            match = _KEYWORD.match(tag.body)
            if not match:
                issues.append((tag.start, TagIssue(tag.raw, f'Unknown tag "{tag.raw}"')))
                continue
            keyword = match.group(1)

            if keyword == "set" and "=" not in tag.body:
                # {% set x %}...{% endset %}
                stack.append(("set", tag))
                continue

            if keyword in _BLOCK_ENDS:
                end = _BLOCK_ENDS[keyword]
                error = self._syntax_error("{%% %s %%}{%% %s %%}" % (tag.body, end))
                if error:
                    issues.append((tag.start, TagIssue(
                        tag.raw, f'Invalid tag "{tag.raw}": {error}'
                    )))
                stack.append((keyword, tag))
                continue

            if keyword in _INTERMEDIATE:
                allowed = _INTERMEDIATE[keyword]
                if not stack or stack[-1][0] not in allowed:
                    issues.append((tag.start, TagIssue(
                        tag.raw,
                        f'Unexpected "{tag.raw}" outside of a loop or condition',
                    )))
                    continue
                if stack[-1][0] == "if":
                    source = "{%% if true %%}{%% %s %%}{%% endif %%}" % tag.body
                else:
                    source = "{%% for _ in [] %%}{%% %s %%}{%% endfor %%}" % tag.body
                error = self._syntax_error(source)
                if error:
                    issues.append((tag.start, TagIssue(
                        tag.raw, f'Invalid tag "{tag.raw}": {error}'
                    )))
                continue

            if keyword.startswith("end"):
                opened = keyword[3:]
                position = next(
                    (
                        i
                        for i in range(len(stack) - 1, -1, -1)
                        if stack[i][0] == opened
                    ),
                    None,
                )
                if position is None:
                    issues.append((tag.start, TagIssue(
                        tag.raw, f'Unopened block end "{tag.raw}"'
                    )))
                    continue
                for unclosed_keyword, unclosed in stack[position + 1:]:
                    issues.append((unclosed.start, self._unclosed(unclosed_keyword, unclosed)))
                del stack[position:]
                continue

            if keyword in _STANDALONE:
                error = self._syntax_error("{%% %s %%}" % tag.body)
                if error:
                    issues.append((tag.start, TagIssue(
                        tag.raw, f'Invalid tag "{tag.raw}": {error}'
                    )))
                continue

            issues.append((tag.start, TagIssue(tag.raw, f'Unknown tag "{tag.raw}"')))

        for keyword, tag in stack:
            issues.append((tag.start, self._unclosed(keyword, tag)))

        return issues

    @staticmethod
    def _unclosed(keyword: str, tag: Tag) -> TagIssue:
        noun = _NOUNS.get(keyword, "block")
        end = _BLOCK_ENDS.get(keyword, "end" + keyword)
        return TagIssue(
            tag.raw,
            f'Unclosed {noun} "{tag.raw}": missing "{{% {end} %}}"',
        )

    def diagnose(self, text: str) -> list[TagIssue]:
        """
        텍스트의 모든 태그 문제를 문서 순서대로 반환.

        Args:
            text: 템플릿에서 추출한 보이는 텍스트

        Returns:
            TagIssue 목록 (문제 없으면 빈 목록)
        """
        tags, issues = scan_tags(text)

        for tag in tags:
            if tag.kind == "variable":
                issue = self._check_variable(tag)
                if issue:
                    issues.append((tag.start, issue))

        issues.extend(self._check_blocks(tags))
        issues.sort(key=lambda item: item[0])
        return [issue for _, issue in issues]


def diagnose(text: str) -> list[TagIssue]:
    """TagDiagnostics().diagnose() 간편 함수."""
    return TagDiagnostics().diagnose(text)
