from enum import Enum


class WorkflowStep(str, Enum):
    LANDING = "landing"                          # 시작 화면
    BRAND_INPUT = "brand_input"                  # 로고·제품·설명 입력
    CREATIVE_GENERATION = "creative_generation"  # 컨셉 생성 및 선택
    FINAL_REVIEW = "final_review"                # 요약·설정·저장
    META_CONNECT = "meta_connect"                # 로그인 및 포트폴리오 선택
    ASSET_SELECTION = "asset_selection"          # 페이지/광고 계정 선택
    LAUNCHING = "launching"                      # 캠페인 생성 중
    SUCCESS = "success"                          # 완료
