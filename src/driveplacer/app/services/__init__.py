"""
App Services.

- tree: 폴더 평면 목록 → 계층 트리
- placement: AI 폴더 배치 추천
- upload: 저장 → 추천 → 이동
- commands: 채팅 명령 규칙 디스패처
"""

from .commands import COMMAND_RULES, CommandContext, CommandReply, dispatch_command
from .placement import PlacementResolver, classify_file_type
from .tree import assemble_tree, build_folder_tree, fetch_all_folders
from .upload import UploadService

__all__ = [
    "COMMAND_RULES",
    "CommandContext",
    "CommandReply",
    "dispatch_command",
    "PlacementResolver",
    "classify_file_type",
    "assemble_tree",
    "build_folder_tree",
    "fetch_all_folders",
    "UploadService",
]
