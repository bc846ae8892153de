from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # LLM API (프록시 서버 측에서만 사용)
    openai_api_key: str = ""

    # Model Configuration
    # 이름·프롬프트·타게팅 등 텍스트 생성
    text_model: str = "gpt-4o-mini"
    # 광고 컨셉 생성: 제품 이미지가 있으면 Vision 입력 포함
    concept_model: str = "gpt-4o"

    # Image Generation (fal.ai)
    fal_key: str = ""
    image_gen_model: str = "fal-ai/flux/dev"
    # false면 로고·제품·광고 비주얼을 설명 텍스트만으로 반환
    image_generation: bool = True
    logo_size: int = 1024
    # 제품·광고 비주얼은 세로형(3:4)
    portrait_width: int = 768
    portrait_height: int = 1024

    # Generation Configuration
    name_count: int = 5
    image_prompt_count: int = 3
    concept_batch_size: int = 3
    # Vision 입력 전 제품 이미지 최대 변 길이 (px)
    vision_image_max_side: int = 1024

    # AI Proxy Configuration
    # 브라우저 앱이 떠 있는 origin. 엔드포인트 해석의 기준
    app_origin: str = "http://localhost:5173"
    dev_hosts: list[str] = ["localhost", "127.0.0.1"]
    dev_port: int = 5173
    dev_proxy_url: str = "http://localhost:3001/api/generate"
    proxy_path: str = "/api/generate"
    proxy_timeout: float = 60.0

    # Proxy Server
    server_host: str = "127.0.0.1"
    server_port: int = 3001

    # Meta Graph API
    facebook_app_id: str = ""
    graph_api_version: str = "v19.0"
    graph_base_url: str = "https://graph.facebook.com"
    oauth_dialog_url: str = "https://www.facebook.com"
    oauth_redirect_uri: str = "http://localhost:5173/"
    oauth_state: str = "socialai_login"
    # 로그인 팝업 응답 대기 시간 (초)
    oauth_timeout: float = 300.0
    # 액세스 토큰 복구용 세션 파일 (비워두면 메모리에만 보관)
    token_store_path: str = ""
    graph_timeout: float = 30.0

    # SSL / Proxy Configuration
    # 기업 프록시 환경에서 SSL 검증 오류 발생 시 false로 설정
    ssl_verify: bool = True
    # 커스텀 CA 인증서 경로 (기업 CA 번들 경로, 비워두면 certifi 기본값 사용)
    ca_bundle_path: str = ""


@lru_cache
def get_settings() -> Settings:
    return Settings()
