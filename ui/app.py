import json
import os
import sys
import logging

import streamlit as st
import streamlit.components.v1 as components

# Ensure project root is on sys.path so that 'bookgraph' package can be imported
CURRENT_DIR = os.path.dirname(os.path.abspath(__file__))
PROJECT_ROOT = os.path.dirname(CURRENT_DIR)
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)

# Basic logging configuration so everything goes to the terminal
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

from bookgraph.config import get_settings
from bookgraph.fact_extractor import BookRecord
from bookgraph.graph_store import build_graph_html
from bookgraph.library import LibraryService, create_library
from bookgraph.triples import Statement


settings = get_settings()


@st.cache_resource
def get_library() -> LibraryService:
    library = create_library(settings)
    library.init()
    return library


st.set_page_config(page_title="Library assistant", layout="wide")
st.title("Library assistant")

library = get_library()

st.sidebar.header("Settings")
st.sidebar.write(f"Graph backend: **{settings.graph_backend}**")
st.sidebar.write(f"LLM model: **{settings.llm_model_name}**")
st.sidebar.write(f"Facts in index: **{len(library.index)}**")


st.subheader("1. Books")

books = library.list_books()
if not books:
    st.info("No books in the graph yet.")
else:
    titles = {b["title"]: b["uri"] for b in books}
    selected = st.selectbox("Book", sorted(titles))
    details = library.book_details(titles[selected]) if selected else None
    if details is not None:
        st.markdown(
            f"**{details.title}** by {details.author}  \n"
            f"Genre: {details.genre}  \n"
            f"Level: {details.level}"
        )
        if details.recommended_for:
            st.success("Recommended for: " + ", ".join(details.recommended_for))
        else:
            st.write("No reader preferences match this book.")

with st.form("update_book"):
    st.markdown("**Add or update a book**")
    book_id = st.text_input("Id")
    title = st.text_input("Title")
    author = st.text_input("Author")
    genre = st.text_input("Genre")
    level = st.text_input("Level")
    if st.form_submit_button("Save"):
        try:
            uri = library.upsert_book(
                BookRecord(id=book_id, title=title, author=author, genre=genre, level=level)
            )
        except ValueError as e:
            st.error(str(e))
        else:
            st.success(f"Saved {uri}; the assistant now knows about it.")
            st.rerun()


st.subheader("2. Chat")

if "chat_history" not in st.session_state:
    st.session_state["chat_history"] = []

for msg in st.session_state["chat_history"]:
    with st.chat_message(msg["role"]):
        st.markdown(msg["content"])


if user_input := st.chat_input("Ask about books or readers..."):
    st.session_state["chat_history"].append({"role": "user", "content": user_input})
    with st.chat_message("user"):
        st.markdown(user_input)

    with st.chat_message("assistant"):
        with st.spinner("Thinking..."):
            answer = library.ask(user_input)
            st.markdown(answer)
    st.session_state["chat_history"].append({"role": "assistant", "content": answer})


st.markdown("---")
st.subheader("3. Knowledge graph")

uploaded = st.file_uploader("Replace the graph with a JSON list of statements", type=["json"])
if uploaded is not None and st.button("Load graph"):
    try:
        statements = [Statement.from_dict(item) for item in json.loads(uploaded.read())]
    except (ValueError, KeyError, TypeError) as e:
        logger.warning("Rejected uploaded graph: %s", e)
        st.error(f"Error: {e}")
    else:
        count = library.replace_graph(statements)
        st.success(f"Upload successful! {len(statements)} statement(s), {count} fact(s).")

if st.button("Show graph"):
    nodes, edges = library.graph_view()
    components.html(build_graph_html(nodes, edges), height=settings.graph_html_height)
