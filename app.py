from __future__ import annotations
from dataclasses import replace
import streamlit as st
import pandas as pd
from attendance.errors import AttendanceError, describe_error
from attendance.schema import load_config, load_variants
from attendance.pipeline import process_batch
from attendance.export import (
    DOWNLOAD_NAME,
    XLSX_MIME,
    duplicates_frame,
    export_to_excel_bytes,
    reports_frame,
    summary_frame,
)
from attendance.utils import rules_path, load_json, setup_logging

RULES = load_json(rules_path(), {})
setup_logging(debug=bool(RULES.get("attendance", {}).get("debug", False)))

st.set_page_config(page_title="Сводка посещаемости", layout="wide")
st.title("Сводка посещаемости по выгрузкам встреч")
# =========================

# Настройки разбора
# =========================
VARIANTS = load_variants(RULES)
DEFAULTS = load_config(RULES)

ENCODINGS = ["utf-16le", "utf-8", "utf-8-sig", "utf-16", "cp1251", "auto"]
DELIMITERS = {"Табуляция": "\t", "Запятая": ",", "Точка с запятой": ";", "Авто": "auto"}

uploads = st.file_uploader(
    "Загрузите выгрузки посещаемости (можно несколько)",
    type=["csv", "tsv", "txt"],
    accept_multiple_files=True
)

st.subheader("Параметры разбора")
c1, c2, c3 = st.columns(3)
with c1:
    variant_keys = list(VARIANTS.keys())
    variant_key = st.selectbox(
        "Вариант выгрузки",
        variant_keys,
        index=variant_keys.index(DEFAULTS.variant.key) if DEFAULTS.variant.key in variant_keys else 0,
        format_func=lambda k: VARIANTS[k].label,
    )
with c2:
    enc_options = ENCODINGS if DEFAULTS.encoding in ENCODINGS else [DEFAULTS.encoding] + ENCODINGS
    encoding = st.selectbox("Кодировка", enc_options, index=enc_options.index(DEFAULTS.encoding))
with c3:
    delim_labels = list(DELIMITERS.keys())
    delim_default = next((k for k, v in DELIMITERS.items() if v == DEFAULTS.delimiter), delim_labels[0])
    delim_label = st.selectbox("Разделитель", delim_labels, index=delim_labels.index(delim_default))

variant = VARIANTS[variant_key]
c4, c5 = st.columns(2)
with c4:
    roles_text = st.text_input(
        "Засчитываемые роли (через запятую)",
        value=", ".join(sorted(variant.qualifying_roles)),
        key=f"roles__{variant_key}",
    )
with c5:
    quote = st.text_input("Символ кавычки (пусто - без кавычек)", value=DEFAULTS.quote or "", max_chars=1)

strict_header = st.checkbox(
    "Считать ошибкой файл без строки-заголовка (Name/Role)",
    value=DEFAULTS.strict_header,
    help="По умолчанию такой файл пропускается с предупреждением и не даёт ни одной записи."
)

roles = [r.strip() for r in roles_text.split(",") if r.strip()]
if not roles:
    st.error("Укажите хотя бы одну засчитываемую роль.")
    st.stop()

config = load_config(
    RULES,
    variant=variant_key,
    encoding=encoding,
    delimiter=DELIMITERS[delim_label],
    quote=quote,
    strict_header=strict_header,
)
config = replace(config, variant=config.variant.with_roles(roles))


# Кэш результата
for k in ["result_ready", "summary_df", "reports_df", "duplicates_df", "no_header"]:
    st.session_state.setdefault(k, None)
st.session_state.setdefault("result_ready", False)

if not uploads:
    st.warning("Загрузите выгрузки.")
    st.stop()

st.divider()
st.subheader("Формирование результата")

if st.button("Сформировать сводку", type="primary"):
    st.session_state["result_ready"] = False
    try:
        result = process_batch(uploads, config)
    except AttendanceError as e:
        # всё-или-ничего: частичную сводку не показываем
        st.error(f"Не удалось обработать пакет. {describe_error(e)}")
        st.stop()
    except ValueError as e:
        st.error(f"Ошибка настроек разбора: {e}")
        st.stop()

    st.session_state["summary_df"] = summary_frame(result.aggregate)
    st.session_state["reports_df"] = reports_frame(result.reports)
    st.session_state["duplicates_df"] = duplicates_frame(result.duplicates)
    st.session_state["no_header"] = result.files_without_header
    st.session_state["result_ready"] = True
    st.success(f"Готово: файлов {len(result.reports)}, людей {len(result.aggregate)}.")


if st.session_state.get("result_ready"):
    summary_df = st.session_state["summary_df"]
    reports_df = st.session_state["reports_df"]
    duplicates_df = st.session_state["duplicates_df"]
    if duplicates_df is None:
        duplicates_df = pd.DataFrame()

    no_header = st.session_state.get("no_header") or []
    if no_header:
        st.warning("Строка-заголовок не найдена, файлы не дали записей: " + ", ".join(no_header))

    with st.expander("Файлы и дубликаты", expanded=False):
        st.dataframe(reports_df, width="stretch")
        if not duplicates_df.empty:
            st.write("Повторные строки внутри файлов (засчитаны один раз):")
            st.dataframe(duplicates_df.head(1000), width="stretch")

    if summary_df is None or summary_df.empty:
        st.error("Результат пустой.")
    else:
        st.subheader("Сводка")
        q = st.text_input("Поиск по имени", value="")
        view = summary_df.copy()
        if q.strip():
            view = view[view["Name"].astype(str).str.contains(q.strip(), case=False, na=False)]
        st.dataframe(view, width="stretch")

        xbytes = export_to_excel_bytes(summary_df, reports_df=reports_df, duplicates_df=duplicates_df)
        st.download_button(
            "Скачать Excel-сводку",
            data=xbytes,
            file_name=DOWNLOAD_NAME,
            mime=XLSX_MIME
        )
