from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.http import current_user, login_required, no_content, parse_body, query_int
from ..container import Container
from .schemas import MemberCreate, MemberUpdate, ProfileUpdate, ToolCreateForMember, ToolUpsert


def register(app: Flask, container: Container) -> None:
    members = container.member_service
    tools = container.tool_service

    @app.route("/api/members", methods=["GET"], endpoint="members_list")
    @login_required
    def list_members():
        return jsonify(
            members.list_members(
                current_user(),
                q=request.args.get("q") or None,
                company=request.args.get("company") or None,
                role=request.args.get("role") or None,
            )
        )

    @app.route("/api/members", methods=["POST"], endpoint="members_create")
    @login_required
    def create_member():
        return jsonify(members.create_member(current_user(), parse_body(MemberCreate))), 201

    @app.route("/api/members/<int:member_id>", methods=["GET"], endpoint="members_get")
    @login_required
    def get_member(member_id: int):
        return jsonify(members.get_member(current_user(), member_id))

    @app.route("/api/members/<int:member_id>", methods=["PUT"], endpoint="members_update")
    @login_required
    def update_member(member_id: int):
        return jsonify(members.update_member(current_user(), member_id, parse_body(MemberUpdate)))

    @app.route("/api/members/<int:member_id>", methods=["DELETE"], endpoint="members_delete")
    @login_required
    def delete_member(member_id: int):
        members.delete_member(current_user(), member_id)
        return no_content()

    @app.route("/api/members/<int:member_id>/profile", methods=["PATCH"], endpoint="members_profile")
    @login_required
    def update_profile(member_id: int):
        return jsonify(members.update_profile(current_user(), member_id, parse_body(ProfileUpdate)))

    @app.route("/api/members/<int:member_id>/tools", methods=["GET"], endpoint="member_tools_list")
    @login_required
    def list_member_tools(member_id: int):
        return jsonify(tools.list_for_member(current_user(), member_id))

    @app.route("/api/members/<int:member_id>/tools", methods=["POST"], endpoint="member_tools_create")
    @login_required
    def create_member_tool(member_id: int):
        return jsonify(tools.create(current_user(), member_id, parse_body(ToolUpsert))), 201

    @app.route("/api/members/<int:member_id>/tools/<int:tool_id>", methods=["PUT"], endpoint="member_tools_update")
    @login_required
    def update_member_tool(member_id: int, tool_id: int):
        return jsonify(tools.update(current_user(), member_id, tool_id, parse_body(ToolUpsert)))

    @app.route("/api/members/<int:member_id>/tools/<int:tool_id>", methods=["DELETE"], endpoint="member_tools_delete")
    @login_required
    def delete_member_tool(member_id: int, tool_id: int):
        tools.delete(current_user(), member_id, tool_id)
        return jsonify({"ok": True})

    @app.route("/api/tools", methods=["GET"], endpoint="tools_list")
    @login_required
    def list_tools():
        return jsonify(
            tools.list_all(
                current_user(),
                company=request.args.get("company") or None,
                member_id=query_int("memberId"),
                tool_name=request.args.get("toolName") or None,
            )
        )

    @app.route("/api/tools", methods=["POST"], endpoint="tools_create")
    @login_required
    def create_tool():
        return jsonify(tools.create_from_body(current_user(), parse_body(ToolCreateForMember))), 201
