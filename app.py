"""
app.py - Streamlit UI for the PDF to Markdown converter.

Run with:
    streamlit run app.py
"""
import logging
import tempfile
import time
from pathlib import Path

import streamlit as st

from converter import convert_file

# Configure logging for the web UI
logging.basicConfig(
    level=logging.WARNING,
    format="%(levelname)s [%(name)s] %(message)s",
)

# Maximum upload size per file (100 MB)
MAX_FILE_SIZE_MB = 100
MAX_FILE_SIZE_BYTES = MAX_FILE_SIZE_MB * 1024 * 1024
PREVIEW_CHARS = 20000

st.set_page_config(
    page_title="PDF to Markdown",
    page_icon="📄",
    layout="centered",
)

st.title("PDF to Markdown")
st.markdown("Upload PDFs to rebuild their **headings, lists, code blocks and tables of contents** as Markdown.")
st.caption(f"Maximum file size: {MAX_FILE_SIZE_MB} MB per file")

uploaded_files = st.file_uploader(
    "Upload one or more PDF files",
    type=["pdf"],
    accept_multiple_files=True,
)

if uploaded_files:
    oversized = [f for f in uploaded_files if f.size > MAX_FILE_SIZE_BYTES]
    if oversized:
        for f in oversized:
            st.error(f"'{f.name}' exceeds the {MAX_FILE_SIZE_MB} MB limit "
                     f"({f.size / 1024 / 1024:.1f} MB)")
        uploaded_files = [f for f in uploaded_files if f.size <= MAX_FILE_SIZE_BYTES]

    if not uploaded_files:
        st.warning("No valid files to convert.")
    else:
        st.markdown(f"**{len(uploaded_files)}** file(s) selected")

        if st.button("Convert to Markdown", type="primary", use_container_width=True):
            results = []

            for uploaded in uploaded_files:
                st.divider()
                st.subheader(uploaded.name)

                with tempfile.TemporaryDirectory() as tmp_dir:
                    input_path = Path(tmp_dir) / uploaded.name
                    input_path.write_bytes(uploaded.getvalue())
                    md_name = f"{input_path.stem}.md"

                    try:
                        start = time.time()
                        with st.spinner("Converting..."):
                            markdown = convert_file(str(input_path))
                        duration = time.time() - start

                        col1, col2, col3 = st.columns(3)
                        col1.metric("Characters", len(markdown))
                        col2.metric("Lines", markdown.count("\n"))
                        col3.metric("Time", f"{duration:.1f}s")

                        with st.expander("Preview"):
                            st.markdown(markdown[:PREVIEW_CHARS])

                        st.download_button(
                            label=f"Download {md_name}",
                            data=markdown.encode("utf-8"),
                            file_name=md_name,
                            mime="text/markdown",
                            use_container_width=True,
                        )
                        results.append((uploaded.name, True, None))

                    except Exception as e:
                        st.error(f"Error: {type(e).__name__}: {e}")
                        results.append((uploaded.name, False, str(e)))

            if len(results) > 1:
                st.divider()
                success = sum(1 for _, ok, _ in results if ok)
                st.markdown(f"### Summary: {success}/{len(results)} files converted successfully")
