# Population run 응답 메시지
NO_NEW_GAMES_MESSAGE = "No new games to add."
POPULATION_FAILED_MESSAGE = "Failed to populate games"

# 게임 검색 요청 검증 메시지
PLATFORM_REQUIRED_MESSAGE = "Platform is required when name is provided"
