"""
🧭 Chapter Navigator
Streamlit page for predicting next/previous chapter URLs
"""

import streamlit as st

from navigator.api import get_pattern_statistics, handle_next_chapter_request
from navigator.config import show_config_status
from navigator.logging_config import logger

# Page configuration
st.set_page_config(
    page_title="Chapter Navigator",
    page_icon="🧭",
    layout="wide",
    initial_sidebar_state="expanded"
)

st.title("🧭 Chapter Navigator")
st.caption("Predict the next and previous chapter of any web novel chapter URL")

st.markdown("---")

col1, col2 = st.columns([2, 1])

with col1:
    st.header("🔗 Chapter URL")
    url = st.text_input("Chapter URL", placeholder="https://example.com/novel/story/chapter-50")

    if st.button("🔍 Predict Navigation", type="primary", disabled=not url):
        with st.spinner("Predicting..."):
            status, body = handle_next_chapter_request({"url": url})

        if status == 200:
            method_icon = "🧩" if body["method"] == "pattern" else "🕸️"
            st.success(f"{method_icon} Method: **{body['method']}** | Confidence: **{body['confidence']:.2f}**"
                       f" | {body['responseTime']}ms{' (cached)' if body['cached'] else ''}")

            nav_prev, nav_next = st.columns(2)
            with nav_prev:
                st.subheader("⬅️ Previous")
                if body["previousUrl"]:
                    st.markdown(f"[{body['previousUrl']}]({body['previousUrl']})")
                else:
                    st.info("No previous chapter found")
            with nav_next:
                st.subheader("➡️ Next")
                if body["nextUrl"]:
                    st.markdown(f"[{body['nextUrl']}]({body['nextUrl']})")
                else:
                    st.info("No next chapter found")

            if body["pattern"]:
                with st.expander("🧩 Pattern details"):
                    st.json(body["pattern"])
        elif status == 400:
            st.error("❌ Invalid request")
            for detail in body.get("details", []):
                st.write(f"- {detail}")
        else:
            logger.error(f"[APP] Prediction failed: {body}")
            st.error(f"💥 {body['message']} (request {body.get('requestId')})")

with col2:
    st.header("📊 Learned Patterns")
    stats = get_pattern_statistics()
    st.metric("Total patterns", stats["totalPatterns"])
    buckets = stats["patternsByConfidence"]
    c_high, c_medium, c_low = st.columns(3)
    c_high.metric("High", buckets["high"])
    c_medium.metric("Medium", buckets["medium"])
    c_low.metric("Low", buckets["low"])

    with st.expander("⚙️ Configuration"):
        st.code(show_config_status())
