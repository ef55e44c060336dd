"""Streamlit frontend for validating and loading spreadsheets through the SheetLoader API."""

from __future__ import annotations

import hashlib
from pathlib import Path
from typing import Any

import pandas as pd
import streamlit as st

from app.config import get_frontend_settings
from frontend.api_client import ApiClientError, SheetLoaderClient
from frontend.error_report import build_invalid_records_frame, invalid_records_to_xlsx

st.set_page_config(page_title="SheetLoader", page_icon="SL", layout="wide")


@st.cache_resource(show_spinner=False)
def _load_client() -> SheetLoaderClient:
    """Build the API client once per Streamlit process."""
    return SheetLoaderClient(settings=get_frontend_settings())


def _reset_validation() -> None:
    st.session_state.validation_result = None
    st.session_state.upload_result = None
    st.session_state.insert_result = None
    st.session_state.notice = None


if "uploaded_hash" not in st.session_state:
    st.session_state.uploaded_hash = None
if "validation_result" not in st.session_state:
    st.session_state.validation_result = None
if "insert_result" not in st.session_state:
    st.session_state.insert_result = None
if "upload_result" not in st.session_state:
    st.session_state.upload_result = None
if "notice" not in st.session_state:
    st.session_state.notice = None


with st.sidebar:
    st.header("Controls")
    st.caption(f"API: {get_frontend_settings().api_base_url}")
    if st.button("Clear", use_container_width=True):
        _reset_validation()
        st.session_state.uploaded_hash = None
        st.rerun()


st.title("SheetLoader")

st.subheader("Step 1: Upload and validate")
uploaded_file = st.file_uploader("Upload Excel or CSV", type=["xlsx", "xlsm", "xls", "csv"])
if uploaded_file is not None:
    uploaded_bytes = uploaded_file.getvalue()
    uploaded_hash = hashlib.sha256(uploaded_bytes).hexdigest()
    if uploaded_hash != st.session_state.uploaded_hash:
        st.session_state.uploaded_hash = uploaded_hash
        _reset_validation()
    st.caption(f"Destination table is derived from the file name: {Path(uploaded_file.name).stem}")

validate_clicked = st.button("Validate", type="primary", disabled=uploaded_file is None)
upload_clicked = st.button(
    "Validate and insert valid rows now",
    disabled=uploaded_file is None,
    help="Skips the review step. Invalid rows are reported and left out.",
)
if upload_clicked and uploaded_file is not None:
    with st.spinner("Uploading..."):
        try:
            uploaded = _load_client().upload(
                file_name=uploaded_file.name,
                content=uploaded_file.getvalue(),
                content_type=uploaded_file.type,
            )
        except ApiClientError as exc:
            st.session_state.upload_result = None
            st.session_state.notice = ("error", str(exc) or "Upload failed")
        else:
            st.session_state.validation_result = None
            st.session_state.insert_result = None
            st.session_state.upload_result = uploaded
            st.session_state.notice = (
                "success" if not uploaded.get("failed") else "warning",
                f"Inserted {uploaded.get('inserted', 0)} records, {uploaded.get('failed', 0)} failed.",
            )

if validate_clicked:
    if uploaded_file is None:
        st.session_state.notice = ("warning", "Please select a file first")
    else:
        with st.spinner("Validating..."):
            try:
                result = _load_client().validate(
                    file_name=uploaded_file.name,
                    content=uploaded_file.getvalue(),
                    content_type=uploaded_file.type,
                )
            except ApiClientError as exc:
                st.session_state.validation_result = None
                st.session_state.notice = ("error", str(exc) or "Upload failed")
            else:
                st.session_state.validation_result = result
                st.session_state.upload_result = None
                st.session_state.insert_result = None
                if result.get("allValid"):
                    st.session_state.notice = (
                        "success",
                        "All records are valid! You can now insert the data.",
                    )
                else:
                    st.session_state.notice = (
                        "warning",
                        f"Found {result.get('invalid', 0)} invalid records. Please fix and re-upload.",
                    )

validation: dict[str, Any] | None = st.session_state.validation_result
if validation is not None:
    col1, col2, col3, col4 = st.columns(4)
    col1.metric("Table", validation.get("table", "-"))
    col2.metric("Total", validation.get("total", 0))
    col3.metric("Valid", validation.get("valid", 0))
    col4.metric("Invalid", validation.get("invalid", 0))

    column_map: dict[str, str] = validation.get("columnMap") or {}
    with st.expander("Column mapping"):
        st.dataframe(
            pd.DataFrame(
                [{"Original": original, "Column": column} for original, column in column_map.items()]
            ),
            use_container_width=True,
        )

    invalid_records = validation.get("invalidRecords") or []
    if invalid_records:
        headers = list(column_map)
        st.dataframe(
            build_invalid_records_frame(invalid_records, headers),
            use_container_width=True,
        )
        st.download_button(
            label="Download invalid records",
            data=invalid_records_to_xlsx(invalid_records, headers),
            file_name="invalid_records.xlsx",
            mime="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
        )

upload_result: dict[str, Any] | None = st.session_state.upload_result
if upload_result is not None:
    col1, col2, col3 = st.columns(3)
    col1.metric("Table", upload_result.get("table", "-"))
    col2.metric("Inserted", upload_result.get("inserted", 0))
    col3.metric("Failed", upload_result.get("failed", 0))

    failed_records = upload_result.get("invalidRecords") or []
    if failed_records:
        failed_headers = list(upload_result.get("columnMap") or {})
        st.dataframe(
            build_invalid_records_frame(failed_records, failed_headers),
            use_container_width=True,
        )
        st.download_button(
            label="Download failed records",
            data=invalid_records_to_xlsx(failed_records, failed_headers),
            file_name="failed_records.xlsx",
            mime="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
        )

st.subheader("Step 2: Insert")
can_insert = bool(validation and validation.get("allValid") and st.session_state.insert_result is None)
insert_clicked = st.button("Insert", type="primary", disabled=not can_insert)
if insert_clicked:
    if not validation or not validation.get("sessionId"):
        st.session_state.notice = ("warning", "Please validate the file first")
    else:
        with st.spinner("Inserting..."):
            try:
                inserted = _load_client().insert(session_id=validation["sessionId"])
            except ApiClientError as exc:
                st.session_state.notice = ("error", str(exc) or "Insertion failed")
            else:
                st.session_state.insert_result = inserted
                st.session_state.notice = (
                    "success",
                    f"Successfully inserted {inserted.get('inserted', 0)} records!",
                )

if st.session_state.notice:
    level, message = st.session_state.notice
    getattr(st, level)(message)
