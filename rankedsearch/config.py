from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", env_prefix="RANKEDSEARCH_"
    )

    # Corpus
    posts_dir: str = "_posts"
    excerpt_words: int = 40

    # Index artifact
    index_path: str = "_site/search.json"

    # Tokenization (one word per line; falls back to NLTK english stopwords)
    stopwords_file: str | None = None

    # Indexing
    index_workers: int = 1
    idf_epsilon: float = 1e-5
    boost_base: float = 1.2

    # Search defaults
    default_top_k: int = 8
    max_search_results: int = 50

    # App
    app_name: str = "Ranked Search"
    app_version: str = "1.0.0"
    debug: bool = False


settings = Settings()
